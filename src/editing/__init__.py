"""Locate SID-addressed targets and apply edit intents to markdown text."""

from .locator import LocatorConfig, SemanticLocator
from .executor import EditIntentExecutor, LineEdit, LineShiftLedger

__all__ = [
    "EditIntentExecutor",
    "LineEdit",
    "LineShiftLedger",
    "LocatorConfig",
    "SemanticLocator",
]
