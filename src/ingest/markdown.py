from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from src.ingest.toc_builder import TOCBuilder, TOCBuilderConfig
from src.utils import detect_newline, remove_number_prefix, split_lines
from src.models.section import Section, SectionStats, SectionTree


_HEADING_PATTERN = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<title>.*?))?(?:[ \t]+#+)?[ \t]*\r?$")
_FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
_SETEXT_PATTERN = re.compile(r"^ {0,3}(?P<rule>=+|-+)[ \t]*$")
_NON_PARAGRAPH_PATTERN = re.compile(r"^(?: {4}|\t| {0,3}(?:>|\||[-*+][ \t]|\d+[.)][ \t]))")
_FRONT_MATTER_DELIMITERS = ("---", "...")
_TABLE_PATTERN = re.compile(r"\|.*\|")
_LIST_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s", re.MULTILINE)


@dataclass(slots=True)
class MarkdownTOCBuilderConfig(TOCBuilderConfig):
    """Configuration for markdown parsing."""

    skip_front_matter: bool = True
    strip_number_prefix: bool = True


class MarkdownTOCBuilder(TOCBuilder):
    """Parse ATX (`#`) and setext (`===`, `---`) headings into a flat, SID-annotated section arena."""

    config: MarkdownTOCBuilderConfig

    def __init__(self, config: MarkdownTOCBuilderConfig | None = None, **kwargs) -> None:
        super().__init__(config or MarkdownTOCBuilderConfig(), **kwargs)
        assert isinstance(self.config, MarkdownTOCBuilderConfig)

    def build(self, text: str) -> SectionTree:
        lines, trailing_newline = split_lines(text)
        last_line = len(lines) - 1

        sections: List[Section] = []
        stack: List[Section] = []

        for line_no, title, level, heading_lines in self._iter_headings(lines):
            while stack and stack[-1].level >= level:
                stack.pop().end_line = line_no - 1

            parent = stack[-1] if stack else None
            normalized = remove_number_prefix(title) if self.config.strip_number_prefix else title
            section = Section(
                index=len(sections),
                level=level,
                title=title,
                normalized_title=normalized,
                start_line=line_no,
                end_line=last_line,
                heading_lines=heading_lines,
                parent_index=parent.index if parent else None,
            )
            if parent is not None:
                parent.child_indices.append(section.index)
            sections.append(section)
            stack.append(section)

        self._finalize(sections, lines)
        self.generator.assign(sections)
        tree = SectionTree(
            sections=sections,
            lines=lines,
            trailing_newline=trailing_newline,
            newline=detect_newline(text),
        )
        self.logger.debug("Parsed %d sections from %d lines", len(sections), len(lines))
        return tree

    # Helpers --------------------------------------------------------------

    def _iter_headings(self, lines: List[str]) -> List[Tuple[int, str, int, int]]:
        """Yield ``(line_no, title, level, heading_lines)`` for ATX and setext headings."""

        headings: List[Tuple[int, str, int, int]] = []
        start = self._front_matter_end(lines) + 1
        fence: Optional[str] = None
        # first line of the open paragraph a setext underline would promote
        paragraph: Optional[int] = None
        # list, quote, table or indented-code lines continue until a blank line
        container = False

        for line_no in range(start, len(lines)):
            line = lines[line_no]
            fence_match = _FENCE_PATTERN.match(line)
            if fence_match:
                marker = fence_match.group("fence")
                if fence is None:
                    fence = marker
                elif marker[0] == fence[0] and len(marker) >= len(fence) and not line.strip()[len(marker):].strip():
                    fence = None
                paragraph, container = None, False
                continue
            if fence is not None:
                continue

            match = _HEADING_PATTERN.match(line)
            if match:
                level = min(len(match.group("hashes")), self.config.max_depth)
                title = (match.group("title") or "").strip()
                headings.append((line_no, title, level, 1))
                paragraph, container = None, False
                continue

            underline = _SETEXT_PATTERN.match(line)
            if underline and paragraph is not None:
                level = min(1 if underline.group("rule")[0] == "=" else 2, self.config.max_depth)
                title = " ".join(text.strip() for text in lines[paragraph:line_no])
                headings.append((paragraph, title, level, line_no - paragraph + 1))
                paragraph = None
                continue

            if not line.strip():
                paragraph, container = None, False
            elif _NON_PARAGRAPH_PATTERN.match(line):
                paragraph, container = None, True
            elif underline:
                paragraph = None
            elif paragraph is None and not container:
                paragraph = line_no
        return headings

    def _front_matter_end(self, lines: List[str]) -> int:
        """Index of the closing front-matter delimiter, or -1 when there is none."""

        if not self.config.skip_front_matter or not lines or lines[0].strip() != "---":
            return -1
        for line_no in range(1, len(lines)):
            if lines[line_no].strip() in _FRONT_MATTER_DELIMITERS:
                return line_no
        return -1

    def _finalize(self, sections: List[Section], lines: List[str]) -> None:
        siblings: Dict[Optional[int], List[Section]] = defaultdict(list)
        for section in sections:
            siblings[section.parent_index].append(section)
            body = "\n".join(lines[section.body_start : section.end_line + 1])
            section.stats = _analyze(body)
            if self.config.include_body:
                section.content = "\n".join(lines[section.start_line : section.end_line + 1])

        for group in siblings.values():
            for position, section in enumerate(group):
                section.sibling_index = position
                section.sibling_count = len(group)


def _analyze(body: str) -> SectionStats:
    return SectionStats(
        word_count=len(body.split()),
        character_count=len(body),
        contains_code="```" in body or "~~~" in body,
        contains_tables=bool(_TABLE_PATTERN.search(body)),
        contains_lists=bool(_LIST_PATTERN.search(body)),
    )


def parse_sections(text: str, config: MarkdownTOCBuilderConfig | None = None, **kwargs) -> SectionTree:
    """Parse ``text`` with a default-configured markdown builder."""

    return MarkdownTOCBuilder(config, **kwargs).build(text)


__all__ = ["MarkdownTOCBuilder", "MarkdownTOCBuilderConfig", "parse_sections"]
