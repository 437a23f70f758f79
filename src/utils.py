from __future__ import annotations

import hashlib
import re
from typing import List, Tuple


_NUMBER_PREFIX_PATTERNS = (
    re.compile(r"^[\d.]+\.?\s+"),
    re.compile(r"^[（(][一二三四五六七八九十\d]+[）)]\s*"),
    re.compile(r"^第[一二三四五六七八九十百\d]+[章节部分]\s*"),
    re.compile(r"^[IVXLCDM]+\.\s+"),
    re.compile(r"^[A-Z][.)]\s+"),
)

_HEADING_MARKER_PATTERN = re.compile(r"^\s{0,3}#{1,6}(?:\s+|$)")
_LIST_MARKER_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
_IMAGE_OR_LINK_PATTERN = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_EMPHASIS_PATTERN = re.compile(r"(\*{1,3}|_{2,3}|~~|`+)")
_NON_WORD_PATTERN = re.compile(r"[^\w\s]")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def detect_newline(text: str) -> str:
    """Return the newline sequence ending the first line of ``text``."""

    first = text.find("\n")
    return "\r\n" if first > 0 and text[first - 1] == "\r" else "\n"


def split_lines(text: str) -> Tuple[List[str], bool]:
    """Split text into lines and report whether it ended with a newline.

    Both ``\\n`` and ``\\r\\n`` terminate a line. A trailing newline ends the
    last line instead of opening an empty one.
    """

    if not text:
        return [], False
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    trailing_newline = text.endswith("\n")
    if trailing_newline:
        lines.pop()
    return lines, trailing_newline


def join_lines(lines: List[str], trailing_newline: bool, newline: str = "\n") -> str:
    if not lines:
        return ""
    text = newline.join(lines)
    return text + newline if trailing_newline else text


def remove_number_prefix(title: str) -> str:
    """Drop outline numbering such as ``1.2``, ``(3)``, ``第一章`` or ``IV.``."""

    clean = title.strip()
    for pattern in _NUMBER_PREFIX_PATTERNS:
        clean = pattern.sub("", clean)
    clean = clean.strip()
    return clean or title.strip()


def strip_inline_markup(text: str) -> str:
    """Reduce inline markdown to its visible text."""

    text = _HEADING_MARKER_PATTERN.sub("", text)
    text = _LIST_MARKER_PATTERN.sub("", text)
    text = _IMAGE_OR_LINK_PATTERN.sub(r"\1", text)
    return _EMPHASIS_PATTERN.sub("", text)


def normalize_text(text: str) -> str:
    """Lower-case, markup- and punctuation-free form used for fuzzy line matching."""

    text = strip_inline_markup(text.lower())
    text = _NON_WORD_PATTERN.sub("", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def short_hash(content: str, length: int = 6) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:length]


__all__ = [
    "detect_newline",
    "join_lines",
    "normalize_text",
    "remove_number_prefix",
    "short_hash",
    "split_lines",
    "strip_inline_markup",
]
