from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from src.editing.locator import LocatorConfig, SemanticLocator
from src.errors import EditError, EditErrorKind, InvalidSidError, MalformedIntentError, error_for_kind
from src.ingest.markdown import MarkdownTOCBuilder
from src.ingest.toc_builder import TOCBuilder
from src.utils import join_lines, split_lines
from src.models.intent import (
    INTENT_TYPES,
    AppendToSectionIntent,
    DeleteSectionContentIntent,
    EditIntent,
    InsertSectionContentIntent,
    LineRange,
    PrependToSectionIntent,
    ReplaceSectionContentIntent,
    parse_intent,
)
from src.models.location import LocationResult
from src.models.results import AppliedIntent, EditMetadata, EditResponse, FailedIntent, IntentError
from src.sid.validator import validate_sid


_OPERATIONS = {
    ReplaceSectionContentIntent: "replace",
    InsertSectionContentIntent: "insert",
    DeleteSectionContentIntent: "delete",
    AppendToSectionIntent: "append",
    PrependToSectionIntent: "prepend",
}


@dataclass(slots=True)
class LineEdit:
    """One applied edit in the coordinates of the text it was applied to.

    ``first_line..last_line`` are the 0-based old lines that were rewritten;
    an insertion has ``last_line == first_line - 1``.
    """

    first_line: int
    last_line: int
    delta: int
    inline: bool = False


@dataclass(slots=True)
class LineShiftLedger:
    """Maps line numbers of the submitted document onto the current text."""

    edits: List[LineEdit] = field(default_factory=list)

    def record(self, edit: LineEdit) -> None:
        self.edits.append(edit)

    def translate_line(self, line: int) -> int:
        for edit in self.edits:
            if line > edit.last_line:
                line += edit.delta
            elif line < edit.first_line:
                continue
            elif edit.inline and edit.delta == 0:
                continue
            else:
                raise MalformedIntentError(
                    f"Line {line + 1} was already rewritten by an earlier intent in this batch",
                    {"hint": "Target the new content by targetContent instead of lineRange"},
                )
        return line

    def translate(self, line_range: LineRange) -> LineRange:
        if not self.edits:
            return line_range
        start = self.translate_line(line_range.start_line - 1) + 1
        end = None
        if line_range.end_line is not None:
            end = self.translate_line(line_range.end_line - 1) + 1
        return LineRange(start_line=start, end_line=end)


class EditIntentExecutor:
    """Apply a batch of edit intents to one markdown text.

    Intents run in input order; each one is parsed and located against the
    text produced by the intents before it, so one failure never blocks the
    rest of the batch.
    """

    def __init__(
        self,
        builder: TOCBuilder | None = None,
        locator_config: LocatorConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.builder = builder or MarkdownTOCBuilder(logger=self.logger)
        self.locator_config = locator_config or LocatorConfig()

    def execute(self, text: str, intents: Sequence[Any]) -> EditResponse:
        started = time.perf_counter()
        self.logger.info("Executing %d intents against %d characters", len(intents), len(text))

        current = text
        ledger = LineShiftLedger()
        applied: List[AppliedIntent] = []
        failed: List[FailedIntent] = []

        for order, raw in enumerate(intents, start=1):
            try:
                intent = self._parse(raw)
                current, record = self._apply(current, intent, order, ledger)
            except EditError as exc:
                self.logger.warning("Intent %d failed (%s): %s", order, exc.kind.value, exc.message)
                failed.append(
                    FailedIntent(
                        intent=_dump(raw),
                        error=IntentError(kind=exc.kind, message=exc.message, suggestions=exc.suggestions),
                    )
                )
                continue
            applied.append(record)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.logger.info(
            "Batch finished: %d applied, %d failed in %.2f ms", len(applied), len(failed), elapsed_ms
        )
        return EditResponse(
            success=not failed,
            successful_intents=len(applied),
            failed_intents=failed,
            applied_intents=applied,
            text=current,
            metadata=EditMetadata(
                execution_time_ms=round(elapsed_ms, 3),
                timestamp=datetime.now(timezone.utc).isoformat(),
                document_length=len(current),
            ),
        )

    # Steps ----------------------------------------------------------------

    def _parse(self, raw: Any) -> EditIntent:
        try:
            return parse_intent(raw)
        except ValidationError as exc:
            raise MalformedIntentError(
                _format_validation_error(exc),
                {"supported_types": list(INTENT_TYPES)},
            ) from exc

    def _apply(
        self,
        text: str,
        intent: EditIntent,
        order: int,
        ledger: LineShiftLedger,
    ) -> Tuple[str, AppliedIntent]:
        target = intent.target
        validation = validate_sid(target.sid)
        if not validation.is_valid:
            raise InvalidSidError(validation.error or "Invalid SID", validation.suggestions)

        adjusted: Optional[LineRange] = None
        if target.line_range is not None:
            translated = ledger.translate(target.line_range)
            if translated != target.line_range:
                adjusted = translated
                target = target.model_copy(update={"line_range": translated})

        tree = self.builder.build(text)
        locator = SemanticLocator(tree, self.locator_config, logger=self.logger)
        operation = _OPERATIONS[type(intent)]
        location = locator.find_target(target, operation)
        if not location.found:
            raise error_for_kind(
                location.error_kind or EditErrorKind.MALFORMED_INTENT,
                location.error or "Target could not be located",
                location.suggestions,
            )

        record = AppliedIntent(
            intent=intent.model_dump(by_alias=True, exclude_none=True),
            execution_order=order,
            adjusted_line_range=adjusted,
            validated_only=intent.validate_only,
        )
        if intent.validate_only:
            self.logger.info("Intent %d validated on sid=%s", order, target.sid)
            return text, record

        lines = list(tree.lines)
        trailing_newline = tree.trailing_newline or not lines
        edit = self._mutate(lines, intent, location)
        if edit is not None:
            ledger.record(edit)
        self.logger.info("Intent %d applied: %s on sid=%s", order, intent.type, target.sid)
        return join_lines(lines, trailing_newline, tree.newline), record

    def _mutate(self, lines: List[str], intent: EditIntent, location: LocationResult) -> Optional[LineEdit]:
        """Apply ``intent`` to ``lines`` in place and describe the change."""

        if location.insertion_point is not None:
            at = min(location.insertion_point.line, len(lines))
            block = _content_lines(intent.content or "")
            lines[at:at] = block
            return LineEdit(first_line=at, last_line=at - 1, delta=len(block))

        if location.range is None:
            return None

        start, end = location.range.start, location.range.end
        old_count = end.line - start.line + 1
        replacement = "" if isinstance(intent, DeleteSectionContentIntent) else intent.content or ""

        if location.match_kind == "content":
            original = lines[start.line : end.line + 1]
            merged = lines[start.line][: start.character] + replacement + lines[end.line][end.character :]
            block = [line[:-1] if line.endswith("\r") else line for line in merged.split("\n")]
            if len(block) > 1 and not block[-1] and replacement.endswith("\n"):
                # the matched line already carries its own line break
                block.pop()
            if isinstance(intent, DeleteSectionContentIntent) and not merged.strip() and any(
                line.strip() for line in original
            ):
                block = []
            lines[start.line : end.line + 1] = block
            return LineEdit(start.line, end.line, len(block) - old_count, inline=True)

        block = _content_lines(replacement)
        if isinstance(intent, DeleteSectionContentIntent) and intent.target.line_range is None and end.line + 1 < len(lines):
            # keep the heading separated from whatever follows the cleared body
            block = [""]
        lines[start.line : end.line + 1] = block
        return LineEdit(start.line, end.line, len(block) - old_count)


def _content_lines(content: str) -> List[str]:
    lines, _ = split_lines(content)
    return lines


def _dump(raw: Any) -> Any:
    if hasattr(raw, "model_dump"):
        return raw.model_dump(by_alias=True, exclude_none=True)
    return raw


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Malformed intent: " + "; ".join(parts)


__all__ = ["EditIntentExecutor", "LineEdit", "LineShiftLedger"]
