from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from src.errors import EditErrorKind
from src.utils import normalize_text
from src.models.intent import EditTarget, LineRange
from src.models.location import LocationContext, LocationResult, Position, TextRange
from src.models.section import Section, SectionTree
from src.sid.validator import find_similar_sids, validate_sid


SECTION_OPERATIONS = ("replace", "before", "after", "append", "prepend", "delete", "insert")


@dataclass(slots=True)
class LocatorConfig:
    anchor_window: int = 10
    strict_matching: bool = False
    max_listed_sids: int = 20


class SemanticLocator:
    """Resolve SID-addressed targets to concrete ranges or insertion points.

    The locator works on one parsed snapshot; callers re-create it whenever
    the text changes. All failures come back as ``LocationResult.failure``.
    """

    def __init__(
        self,
        tree: SectionTree,
        config: LocatorConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.tree = tree
        self.config = config or LocatorConfig()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def lines(self) -> List[str]:
        return self.tree.lines

    def find_target(self, target: EditTarget, operation: str = "replace") -> LocationResult:
        if operation not in SECTION_OPERATIONS:
            return LocationResult.failure(
                EditErrorKind.MALFORMED_INTENT,
                f"Unknown operation '{operation}'",
                {"supported_operations": list(SECTION_OPERATIONS)},
            )

        validation = validate_sid(target.sid, self.tree.sids)
        if not validation.is_valid:
            self.logger.warning("Rejected malformed SID %r: %s", target.sid, validation.error)
            return LocationResult.failure(EditErrorKind.INVALID_SID, validation.error or "Invalid SID", validation.suggestions)

        section = self.tree.get(target.sid)
        if section is None:
            return self._section_not_found(target.sid)

        self.logger.info("Locating %s on sid=%s", operation, target.sid)
        result = self._dispatch(section, target, operation)
        if result.found:
            result.context = self._build_context(section)
        else:
            self.logger.warning("Target not located on sid=%s: %s", target.sid, result.error)
        return result

    # Dispatch -------------------------------------------------------------

    def _dispatch(self, section: Section, target: EditTarget, operation: str) -> LocationResult:
        if operation in ("append", "prepend"):
            return self._section_position(section, operation)

        if operation in ("before", "after", "insert"):
            if target.after_content is not None:
                return self._insertion_near_content(section, target.after_content, True, target.context_anchor)
            if target.before_content is not None:
                return self._insertion_near_content(section, target.before_content, False, target.context_anchor)
            if target.line_range is not None:
                return self._line_insertion(section, target.line_range)
            if operation == "insert":
                if target.insertion_position is None:
                    return LocationResult.failure(
                        EditErrorKind.MALFORMED_INTENT,
                        "insertionPosition ('before' or 'after') is required to insert relative to a section",
                        {"available_positions": ["before", "after"]},
                    )
                operation = target.insertion_position
            return self._section_position(section, operation)

        fragment = target.target_content
        if operation == "delete" and target.content_to_remove is not None:
            fragment = target.content_to_remove
        if fragment is not None:
            return self._fragment_range(section, fragment, target.context_anchor)
        if target.line_range is not None:
            return self._line_range(section, target.line_range)
        return self._section_position(section, operation)

    # Section-level resolution ---------------------------------------------

    def _section_position(self, section: Section, operation: str) -> LocationResult:
        if operation == "replace":
            end_line = section.end_line
            return LocationResult(
                found=True,
                range=TextRange(Position(section.start_line, 0), Position(end_line, self._line_length(end_line))),
                match_kind="section",
            )
        if operation == "before":
            return self._insertion(section.start_line)
        if operation == "after":
            boundary = self.tree.next_boundary(section)
            return self._insertion(boundary.start_line if boundary else section.end_line + 1)
        if operation == "prepend":
            return self._insertion(section.body_start)
        if operation == "append":
            last = self._last_non_blank(section.body_start, section.end_line)
            return self._insertion(last + 1 if last is not None else section.body_start)

        # delete without a fragment or line range clears the section's own body
        body_start, body_end = self.tree.body_span(section)
        if body_start > body_end:
            return LocationResult(found=True, match_kind="lines")
        return LocationResult(
            found=True,
            range=TextRange(Position(body_start, 0), Position(body_end, self._line_length(body_end))),
            match_kind="lines",
        )

    def _line_range(self, section: Section, line_range: LineRange) -> LocationResult:
        start = line_range.start_line - 1
        end = (line_range.end_line or line_range.start_line) - 1
        if start < section.body_start or end > section.end_line:
            return LocationResult.failure(
                EditErrorKind.MALFORMED_INTENT,
                f"Lines {line_range.start_line}-{end + 1} are outside the content of section "
                f"'{section.title}' (heading on line {section.start_line + 1})",
                self._span_hint(section),
            )
        return LocationResult(
            found=True,
            range=TextRange(Position(start, 0), Position(end, self._line_length(end))),
            match_kind="lines",
        )

    def _line_insertion(self, section: Section, line_range: LineRange) -> LocationResult:
        line = line_range.start_line - 1
        if line < section.body_start or line > section.end_line + 1:
            return LocationResult.failure(
                EditErrorKind.MALFORMED_INTENT,
                f"Insert line {line_range.start_line} is outside the content of section '{section.title}'",
                self._span_hint(section, insertion=True),
            )
        return self._insertion(line)

    # Content-level resolution ---------------------------------------------

    def _search_window(
        self,
        section: Section,
        anchor: Optional[str],
    ) -> Tuple[Optional[Tuple[int, int]], Optional[LocationResult]]:
        start, end = section.body_start, section.end_line
        if start > end:
            return None, LocationResult.failure(
                EditErrorKind.CONTENT_NOT_FOUND,
                f"Section '{section.title}' has no content to search",
            )
        if anchor is None:
            return (start, end), None

        needle = anchor.strip()
        if not needle:
            return None, LocationResult.failure(EditErrorKind.CONTENT_NOT_FOUND, "contextAnchor is empty")
        pattern = re.compile(re.escape(needle), re.IGNORECASE)
        anchor_lines = [index for index in range(start, end + 1) if pattern.search(self.lines[index])]
        if not anchor_lines:
            return None, LocationResult.failure(
                EditErrorKind.CONTENT_NOT_FOUND,
                f"Context anchor '{needle}' not found in section '{section.title}'",
                self._span_hint(section),
            )
        if self.config.strict_matching and len(anchor_lines) > 1:
            return None, self._ambiguous(f"Context anchor '{needle}'", anchor_lines)
        first = anchor_lines[0]
        self.logger.debug("Anchor %r found on line %d", needle, first + 1)
        return (first, min(first + self.config.anchor_window, end)), None

    def _fragment_range(self, section: Section, fragment: str, anchor: Optional[str]) -> LocationResult:
        if not fragment.strip():
            return LocationResult.failure(EditErrorKind.CONTENT_NOT_FOUND, "Target content is empty")
        window, failure = self._search_window(section, anchor)
        if failure is not None:
            return failure
        start, end = window  # type: ignore[misc]

        text = "\n".join(self.lines[start : end + 1])
        matches = list(re.finditer(re.escape(fragment), text, re.IGNORECASE))
        if matches:
            if self.config.strict_matching and anchor is None and len(matches) > 1:
                return self._ambiguous(
                    f"Content '{fragment}'",
                    [start + text.count("\n", 0, match.start()) for match in matches],
                )
            match = matches[0]
            return LocationResult(
                found=True,
                range=TextRange(
                    self._offset_to_position(start, text, match.start()),
                    self._offset_to_position(start, text, match.end()),
                ),
                match_kind="content",
            )

        normalized = normalize_text(fragment)
        if normalized and "\n" not in fragment.strip():
            hits = [index for index in range(start, end + 1) if normalized in normalize_text(self.lines[index])]
            if hits:
                if self.config.strict_matching and anchor is None and len(hits) > 1:
                    return self._ambiguous(f"Content '{fragment}'", hits)
                line = hits[0]
                self.logger.debug("Matched %r by normalized text on line %d", fragment, line + 1)
                return LocationResult(
                    found=True,
                    range=TextRange(Position(line, 0), Position(line, self._line_length(line))),
                    match_kind="content",
                )

        return LocationResult.failure(
            EditErrorKind.CONTENT_NOT_FOUND,
            f"Content '{fragment}' not found in section '{section.title}'"
            + (f" within {self.config.anchor_window} lines after anchor '{anchor.strip()}'" if anchor else ""),
            self._span_hint(section),
        )

    def _insertion_near_content(
        self,
        section: Section,
        fragment: str,
        after: bool,
        anchor: Optional[str],
    ) -> LocationResult:
        if not fragment.strip():
            return LocationResult.failure(EditErrorKind.CONTENT_NOT_FOUND, "Reference content is empty")
        window, failure = self._search_window(section, anchor)
        if failure is not None:
            return failure
        start, end = window  # type: ignore[misc]

        normalized = normalize_text(fragment)
        if normalized:
            hits = [index for index in range(start, end + 1) if normalized in normalize_text(self.lines[index])]
        else:
            pattern = re.compile(re.escape(fragment.strip()), re.IGNORECASE)
            hits = [index for index in range(start, end + 1) if pattern.search(self.lines[index])]

        if not hits:
            label = "afterContent" if after else "beforeContent"
            return LocationResult.failure(
                EditErrorKind.CONTENT_NOT_FOUND,
                f"{label} '{fragment}' not found in section '{section.title}'",
                self._span_hint(section),
            )
        if self.config.strict_matching and anchor is None and len(hits) > 1:
            return self._ambiguous(f"Content '{fragment}'", hits)
        line = hits[0]
        return self._insertion(line + 1 if after else line)

    # Helpers --------------------------------------------------------------

    def _insertion(self, line: int) -> LocationResult:
        return LocationResult(found=True, insertion_point=Position(line, 0), match_kind="insertion")

    def _line_length(self, line: int) -> int:
        return len(self.lines[line]) if 0 <= line < len(self.lines) else 0

    def _last_non_blank(self, start: int, end: int) -> Optional[int]:
        for index in range(end, start - 1, -1):
            if self.lines[index].strip():
                return index
        return None

    @staticmethod
    def _offset_to_position(first_line: int, text: str, offset: int) -> Position:
        line = first_line + text.count("\n", 0, offset)
        line_start = text.rfind("\n", 0, offset) + 1
        return Position(line, offset - line_start)

    def _ambiguous(self, what: str, lines: List[int]) -> LocationResult:
        return LocationResult.failure(
            EditErrorKind.AMBIGUOUS_TARGET,
            f"{what} matches {len(lines)} locations; supply a contextAnchor to choose one",
            {"matching_lines": [line + 1 for line in lines]},
        )

    def _span_hint(self, section: Section, insertion: bool = False) -> dict:
        last = section.end_line + (2 if insertion else 1)
        return {
            "section_title": section.title,
            "section_lines": f"{section.start_line + 1}-{section.end_line + 1}",
            "valid_lines": f"{section.body_start + 1}-{last}",
        }

    def _section_not_found(self, sid: str) -> LocationResult:
        self.logger.warning("Section with sid %r not found", sid)
        available = self.tree.sids
        return LocationResult.failure(
            EditErrorKind.SECTION_NOT_FOUND,
            f"Section with sid '{sid}' not found",
            {
                "available_sids": available[: self.config.max_listed_sids],
                "similar_sids": find_similar_sids(sid, available),
            },
        )

    def _build_context(self, section: Section) -> LocationContext:
        previous = self.tree.previous(section)
        following = self.tree.next(section)
        parent = self.tree.parent(section)
        return LocationContext(
            section_title=section.title,
            before_text=previous.title if previous else "",
            after_text=following.title if following else "",
            parent_section=parent.title if parent else None,
        )


__all__ = ["LocatorConfig", "SECTION_OPERATIONS", "SemanticLocator"]
