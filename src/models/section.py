from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass(slots=True)
class SectionStats:
    word_count: int = 0
    character_count: int = 0
    contains_code: bool = False
    contains_tables: bool = False
    contains_lists: bool = False


@dataclass(slots=True)
class Section:
    """One heading and the lines it governs.

    Line numbers are 0-based and inclusive. Structural links are stored as
    arena indices and SIDs, never as object references.
    """

    index: int
    level: int
    title: str
    normalized_title: str
    start_line: int
    end_line: int
    heading_lines: int = 1
    content: str = ""
    sid: str = ""
    parent_index: Optional[int] = None
    parent_sid: Optional[str] = None
    child_indices: List[int] = field(default_factory=list)
    child_sids: List[str] = field(default_factory=list)
    sibling_index: int = 0
    sibling_count: int = 1
    stats: SectionStats = field(default_factory=SectionStats)

    @property
    def body_start(self) -> int:
        """First line after the heading; setext headings span two lines."""

        return self.start_line + self.heading_lines


@dataclass(slots=True)
class TocEntry:
    """Caller-facing table-of-contents node. Line numbers are 1-based."""

    sid: str
    title: str
    normalized_title: str
    level: int
    line: int
    end_line: int
    parent: Optional[str] = None
    sibling_index: int = 0
    sibling_count: int = 1
    word_count: int = 0
    character_count: int = 0
    contains_code: bool = False
    contains_tables: bool = False
    contains_lists: bool = False
    children: List["TocEntry"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sid": self.sid,
            "title": self.title,
            "normalized_title": self.normalized_title,
            "level": self.level,
            "line": self.line,
            "end_line": self.end_line,
            "parent": self.parent,
            "sibling_index": self.sibling_index,
            "sibling_count": self.sibling_count,
            "word_count": self.word_count,
            "character_count": self.character_count,
            "contains_code": self.contains_code,
            "contains_tables": self.contains_tables,
            "contains_lists": self.contains_lists,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(slots=True)
class SectionTree:
    """Flat, document-ordered arena of sections for a single text snapshot."""

    sections: List[Section]
    lines: List[str]
    trailing_newline: bool = False
    newline: str = "\n"
    _by_sid: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.reindex()

    def reindex(self) -> None:
        self._by_sid = {section.sid: section.index for section in self.sections if section.sid}

    def __len__(self) -> int:
        return len(self.sections)

    def __iter__(self) -> Iterator[Section]:
        return iter(self.sections)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def sids(self) -> List[str]:
        return [section.sid for section in self.sections]

    def get(self, sid: str) -> Optional[Section]:
        index = self._by_sid.get(sid)
        return self.sections[index] if index is not None else None

    def parent(self, section: Section) -> Optional[Section]:
        if section.parent_index is None:
            return None
        return self.sections[section.parent_index]

    def children(self, section: Section) -> List[Section]:
        return [self.sections[index] for index in section.child_indices]

    def previous(self, section: Section) -> Optional[Section]:
        return self.sections[section.index - 1] if section.index > 0 else None

    def next(self, section: Section) -> Optional[Section]:
        position = section.index + 1
        return self.sections[position] if position < len(self.sections) else None

    def next_boundary(self, section: Section) -> Optional[Section]:
        """Next section whose level is the same as or higher than ``section``."""

        for candidate in self.sections[section.index + 1 :]:
            if candidate.level <= section.level:
                return candidate
        return None

    def body_span(self, section: Section) -> Tuple[int, int]:
        """Own body lines (heading excluded, subsections excluded).

        Returns an inclusive ``(start, end)`` pair; ``start > end`` means empty.
        """

        start = section.body_start
        if section.child_indices:
            end = self.sections[section.child_indices[0]].start_line - 1
        else:
            end = section.end_line
        return start, end

    def to_toc(self) -> List[TocEntry]:
        entries: Dict[int, TocEntry] = {}
        roots: List[TocEntry] = []
        for section in self.sections:
            entry = TocEntry(
                sid=section.sid,
                title=section.title,
                normalized_title=section.normalized_title,
                level=section.level,
                line=section.start_line + 1,
                end_line=section.end_line + 1,
                parent=section.parent_sid,
                sibling_index=section.sibling_index,
                sibling_count=section.sibling_count,
                word_count=section.stats.word_count,
                character_count=section.stats.character_count,
                contains_code=section.stats.contains_code,
                contains_tables=section.stats.contains_tables,
                contains_lists=section.stats.contains_lists,
            )
            entries[section.index] = entry
            if section.parent_index is None:
                roots.append(entry)
            else:
                entries[section.parent_index].children.append(entry)
        return roots


__all__ = ["Section", "SectionStats", "SectionTree", "TocEntry"]
