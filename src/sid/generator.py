from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Set

from src.utils import short_hash, strip_inline_markup
from src.models.section import Section
from src.sid.grammar import HYPHEN, SEPARATOR, is_emoji, is_word_char


_HYPHEN_RUN_PATTERN = re.compile(r"-{2,}")


@dataclass(slots=True)
class SidGeneratorConfig:
    hash_length: int = 6
    first_duplicate_counter: int = 2


class SidGenerator:
    """Derive whitelist-safe, hierarchical section identifiers from heading titles."""

    def __init__(self, config: SidGeneratorConfig | None = None) -> None:
        self.config = config or SidGeneratorConfig()

    def slugify(self, title: str) -> str:
        """Map a raw heading title to a single SID segment; never returns ``""``."""

        text = strip_inline_markup(title).lower()
        chars = []
        for char in text:
            if is_emoji(char):
                continue
            chars.append(char if is_word_char(char) else HYPHEN)
        slug = _HYPHEN_RUN_PATTERN.sub(HYPHEN, "".join(chars)).strip(HYPHEN)
        return slug or short_hash(title, self.config.hash_length)

    def compose(self, parent_sid: Optional[str], slug: str, taken: Set[str]) -> str:
        prefix = parent_sid or ""
        candidate = f"{prefix}{SEPARATOR}{slug}"
        counter = self.config.first_duplicate_counter
        while candidate in taken:
            suffix = short_hash(f"{slug}{counter}", self.config.hash_length)
            candidate = f"{prefix}{SEPARATOR}{slug}{HYPHEN}{suffix}"
            counter += 1
        return candidate

    def assign(self, sections: Iterable[Section]) -> None:
        """Attach SIDs in document order; parents always precede their children."""

        ordered = list(sections)
        taken: Set[str] = set()
        for section in ordered:
            parent = ordered[section.parent_index] if section.parent_index is not None else None
            parent_sid = parent.sid if parent else None
            slug = self.slugify(section.normalized_title or section.title)
            section.sid = self.compose(parent_sid, slug, taken)
            section.parent_sid = parent_sid
            taken.add(section.sid)
            if parent is not None:
                parent.child_sids.append(section.sid)


__all__ = ["SidGenerator", "SidGeneratorConfig"]
