from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


InsertionPosition = Literal["before", "after"]


class _CamelModel(BaseModel):
    """Accepts both ``targetContent`` and ``target_content`` style keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LineRange(_CamelModel):
    """1-based, inclusive line span in the document as the caller read it."""

    start_line: int = Field(ge=1)
    end_line: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_order(self) -> "LineRange":
        if self.end_line is not None and self.end_line < self.start_line:
            raise ValueError(f"lineRange endLine {self.end_line} is before startLine {self.start_line}")
        return self


class EditTarget(_CamelModel):
    sid: str
    line_range: LineRange | None = None
    insertion_position: InsertionPosition | None = None
    target_content: str | None = None
    context_anchor: str | None = None
    content_to_remove: str | None = None
    after_content: str | None = None
    before_content: str | None = None


class _IntentBase(_CamelModel):
    target: EditTarget
    content: str | None = None
    reason: str = ""
    priority: int = 0
    validate_only: bool = False

    def _require_content(self) -> None:
        if self.content is None:
            raise ValueError(f"{self.type} requires 'content'")  # type: ignore[attr-defined]


class ReplaceSectionContentIntent(_IntentBase):
    type: Literal["replace_section_content_only"]

    @model_validator(mode="after")
    def _check_fields(self) -> "ReplaceSectionContentIntent":
        self._require_content()
        line_range = self.target.line_range
        if line_range is None and not self.target.target_content:
            raise ValueError("replace_section_content_only requires target.lineRange or target.targetContent")
        if line_range is not None and line_range.end_line is None:
            raise ValueError(
                "replace_section_content_only requires lineRange.endLine; "
                "use the same value as startLine to replace a single line"
            )
        return self


class InsertSectionContentIntent(_IntentBase):
    type: Literal["insert_section_content_only"]

    @model_validator(mode="after")
    def _check_fields(self) -> "InsertSectionContentIntent":
        self._require_content()
        target = self.target
        if not (target.insertion_position or target.after_content or target.before_content or target.line_range):
            raise ValueError(
                "insert_section_content_only requires target.insertionPosition ('before' or 'after'), "
                "target.afterContent, target.beforeContent or target.lineRange"
            )
        if not self.content:
            raise ValueError("insert_section_content_only requires non-empty 'content'")
        return self


class DeleteSectionContentIntent(_IntentBase):
    type: Literal["delete_section_content_only"]

    @model_validator(mode="after")
    def _check_fields(self) -> "DeleteSectionContentIntent":
        line_range = self.target.line_range
        if line_range is not None and line_range.end_line is None:
            raise ValueError("delete_section_content_only requires lineRange.endLine")
        if self.target.after_content or self.target.before_content:
            raise ValueError("delete_section_content_only does not accept afterContent/beforeContent")
        return self


class AppendToSectionIntent(_IntentBase):
    type: Literal["append_to_section"]

    @model_validator(mode="after")
    def _check_fields(self) -> "AppendToSectionIntent":
        self._require_content()
        if not self.content:
            raise ValueError("append_to_section requires non-empty 'content'")
        return self


class PrependToSectionIntent(_IntentBase):
    type: Literal["prepend_to_section"]

    @model_validator(mode="after")
    def _check_fields(self) -> "PrependToSectionIntent":
        self._require_content()
        if not self.content:
            raise ValueError("prepend_to_section requires non-empty 'content'")
        return self


EditIntent = Annotated[
    Union[
        ReplaceSectionContentIntent,
        InsertSectionContentIntent,
        DeleteSectionContentIntent,
        AppendToSectionIntent,
        PrependToSectionIntent,
    ],
    Field(discriminator="type"),
]

INTENT_TYPES = (
    "replace_section_content_only",
    "insert_section_content_only",
    "delete_section_content_only",
    "append_to_section",
    "prepend_to_section",
)

_INTENT_ADAPTER: TypeAdapter[EditIntent] = TypeAdapter(EditIntent)


def parse_intent(raw: Any) -> EditIntent:
    """Validate one intent; raises ``pydantic.ValidationError`` when malformed."""

    if isinstance(raw, _IntentBase):
        return raw  # type: ignore[return-value]
    return _INTENT_ADAPTER.validate_python(raw)


class EditRequest(_CamelModel):
    """Caller payload: intents stay raw so each one is validated on its own."""

    target_file: str
    intents: List[Any] = Field(default_factory=list)


__all__ = [
    "AppendToSectionIntent",
    "DeleteSectionContentIntent",
    "EditIntent",
    "EditRequest",
    "EditTarget",
    "INTENT_TYPES",
    "InsertSectionContentIntent",
    "InsertionPosition",
    "LineRange",
    "PrependToSectionIntent",
    "ReplaceSectionContentIntent",
    "parse_intent",
]
