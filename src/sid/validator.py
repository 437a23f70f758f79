from __future__ import annotations

from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import Any, Dict, Iterable, List, Optional

from src.sid.generator import SidGenerator
from src.sid.grammar import HYPHEN, SEPARATOR, is_emoji, is_word_char


_SID_HINT = "SIDs look like '/section' or '/section/subsection' (lower-case word characters, digits, '-' and '_')."


@dataclass(slots=True)
class SidValidation:
    is_valid: bool
    error: Optional[str] = None
    suggestions: Dict[str, Any] = field(default_factory=dict)


def find_similar_sids(sid: str, available_sids: Iterable[str], limit: int = 3, threshold: float = 0.5) -> List[str]:
    scored = [
        (SequenceMatcher(None, sid, candidate).ratio(), candidate)
        for candidate in available_sids
    ]
    ranked = sorted((item for item in scored if item[0] > threshold), key=lambda item: -item[0])
    return [candidate for _, candidate in ranked[:limit]]


def correct_sid(sid: str, generator: SidGenerator | None = None) -> str:
    """Best-effort rewrite of a malformed SID into the accepted grammar."""

    generator = generator or SidGenerator()
    segments = [segment for segment in sid.strip().split(SEPARATOR) if segment.strip()]
    if not segments:
        return ""
    return "".join(f"{SEPARATOR}{generator.slugify(segment)}" for segment in segments)


def _invalid(sid: str, error: str, available: List[str], **extra: Any) -> SidValidation:
    suggestions: Dict[str, Any] = {"hint": _SID_HINT}
    corrected = correct_sid(sid)
    if corrected and corrected != sid:
        suggestions["corrected_sid"] = corrected
    if available:
        suggestions["similar_sids"] = find_similar_sids(corrected or sid, available)
    suggestions.update(extra)
    return SidValidation(is_valid=False, error=error, suggestions=suggestions)


def validate_sid(sid: Any, available_sids: Iterable[str] = ()) -> SidValidation:
    """Check ``sid`` against the SID grammar.

    Grammar: a leading ``/`` followed by one or more ``/``-separated segments;
    each segment is non-empty, made of whitelisted characters and hyphens, and
    neither starts nor ends with a hyphen.
    """

    available = list(available_sids)
    if not isinstance(sid, str) or not sid:
        return SidValidation(
            is_valid=False,
            error="SID cannot be empty",
            suggestions={"hint": _SID_HINT, "available_sids": available[:5]},
        )
    if not sid.startswith(SEPARATOR):
        return _invalid(sid, f"SID '{sid}' must start with '/'", available)
    if sid == SEPARATOR:
        return _invalid(sid, "SID must contain at least one segment", available)
    if "//" in sid:
        return _invalid(sid, f"SID '{sid}' contains consecutive slashes '//'", available)
    if sid.endswith(SEPARATOR):
        return _invalid(sid, f"SID '{sid}' should not end with '/'", available)

    for segment in sid[1:].split(SEPARATOR):
        invalid_chars = sorted({char for char in segment if char != HYPHEN and not is_word_char(char)})
        if invalid_chars:
            upper = [char for char in invalid_chars if char != char.lower() and not is_emoji(char)]
            if upper and len(upper) == len(invalid_chars):
                return _invalid(sid, f"SID '{sid}' contains upper-case characters: {', '.join(upper)}", available)
            return _invalid(
                sid,
                f"SID '{sid}' contains invalid characters: {', '.join(invalid_chars)}",
                available,
                invalid_characters=invalid_chars,
            )
        if segment.startswith(HYPHEN) or segment.endswith(HYPHEN):
            return _invalid(sid, f"SID segment '{segment}' must not start or end with '-'", available)

    return SidValidation(is_valid=True)


__all__ = ["SidValidation", "correct_sid", "find_similar_sids", "validate_sid"]
