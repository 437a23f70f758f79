"""Error taxonomy for section-addressed edits."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class EditErrorKind(str, Enum):
    INVALID_SID = "InvalidSid"
    SECTION_NOT_FOUND = "SectionNotFound"
    CONTENT_NOT_FOUND = "ContentNotFound"
    AMBIGUOUS_TARGET = "AmbiguousTarget"
    MALFORMED_INTENT = "MalformedIntent"


class EditError(Exception):
    """Base exception for a single intent that could not be applied."""

    kind: EditErrorKind = EditErrorKind.MALFORMED_INTENT

    def __init__(self, message: str, suggestions: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or {}


class InvalidSidError(EditError):
    """Supplied SID does not match the SID grammar."""

    kind = EditErrorKind.INVALID_SID


class SectionNotFoundError(EditError):
    """Well-formed SID that names no section of the current text."""

    kind = EditErrorKind.SECTION_NOT_FOUND


class ContentNotFoundError(EditError):
    """Content fragment or anchor missing from the resolved section."""

    kind = EditErrorKind.CONTENT_NOT_FOUND


class AmbiguousTargetError(EditError):
    """Several equally valid matches and strict matching is enabled."""

    kind = EditErrorKind.AMBIGUOUS_TARGET


class MalformedIntentError(EditError):
    """Intent fields are missing or inconsistent for its operation type."""

    kind = EditErrorKind.MALFORMED_INTENT


_ERRORS_BY_KIND = {
    error.kind: error
    for error in (
        InvalidSidError,
        SectionNotFoundError,
        ContentNotFoundError,
        AmbiguousTargetError,
        MalformedIntentError,
    )
}


def error_for_kind(kind: str | EditErrorKind, message: str, suggestions: Optional[Dict[str, Any]] = None) -> EditError:
    return _ERRORS_BY_KIND[EditErrorKind(kind)](message, suggestions)


__all__ = [
    "AmbiguousTargetError",
    "ContentNotFoundError",
    "EditError",
    "EditErrorKind",
    "InvalidSidError",
    "MalformedIntentError",
    "SectionNotFoundError",
    "error_for_kind",
]
