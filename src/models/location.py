from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional


MatchKind = Literal["section", "lines", "content", "insertion"]


@dataclass(frozen=True, slots=True)
class Position:
    """0-based line and character offset."""

    line: int
    character: int = 0


@dataclass(frozen=True, slots=True)
class TextRange:
    start: Position
    end: Position


@dataclass(slots=True)
class LocationContext:
    section_title: str
    before_text: str = ""
    after_text: str = ""
    parent_section: Optional[str] = None


@dataclass(slots=True)
class LocationResult:
    """Outcome of resolving a logical target against a document snapshot."""

    found: bool
    range: Optional[TextRange] = None
    insertion_point: Optional[Position] = None
    match_kind: Optional[MatchKind] = None
    context: Optional[LocationContext] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None
    suggestions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(
        cls,
        error_kind: str,
        error: str,
        suggestions: Optional[Dict[str, Any]] = None,
    ) -> "LocationResult":
        return cls(found=False, error_kind=error_kind, error=error, suggestions=suggestions or {})


__all__ = ["LocationContext", "LocationResult", "MatchKind", "Position", "TextRange"]
