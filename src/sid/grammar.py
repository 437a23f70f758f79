"""Character classes shared by SID generation and validation.

Both sides call the same predicates, so a slug the generator emits can only
contain characters the validator accepts.
"""

from __future__ import annotations

import unicodedata


SEPARATOR = "/"
HYPHEN = "-"

_COMBINING_CATEGORIES = frozenset({"Mn", "Mc"})
_EMOJI_CATEGORIES = frozenset({"So", "Me"})


def is_emoji(char: str) -> bool:
    """Pictographs and the invisible code points that decorate them."""

    code = ord(char)
    if 0xFE00 <= code <= 0xFE0F or 0xE0100 <= code <= 0xE01EF:
        return True  # variation selectors
    if code == 0x200D or 0xE0020 <= code <= 0xE007F:
        return True  # zero-width joiner, tag sequences
    if 0x1F3FB <= code <= 0x1F3FF or 0x1F000 <= code <= 0x1FAFF:
        return True
    return unicodedata.category(char) in _EMOJI_CATEGORIES


def is_word_char(char: str) -> bool:
    """Whitelisted segment character: lower-case letters or digits of any script,
    combining marks, and the underscore."""

    if char == "_":
        return True
    if char != char.lower() or is_emoji(char):
        return False
    if char.isalnum():
        return True
    return unicodedata.category(char) in _COMBINING_CATEGORIES


def is_valid_segment(segment: str) -> bool:
    if not segment or segment.startswith(HYPHEN) or segment.endswith(HYPHEN):
        return False
    return all(char == HYPHEN or is_word_char(char) for char in segment)


__all__ = ["HYPHEN", "SEPARATOR", "is_emoji", "is_valid_segment", "is_word_char"]
