from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.errors import EditErrorKind
from src.models.intent import LineRange


class _ResultModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IntentError(_ResultModel):
    kind: EditErrorKind
    message: str
    suggestions: Dict[str, Any] = Field(default_factory=dict)


class FailedIntent(_ResultModel):
    intent: Any
    error: IntentError


class AppliedIntent(_ResultModel):
    intent: Any
    execution_order: int
    adjusted_line_range: LineRange | None = None
    validated_only: bool = False


class EditMetadata(_ResultModel):
    execution_time_ms: float
    timestamp: str
    document_length: int


class EditResponse(_ResultModel):
    """Aggregate outcome of one batch; ``success`` only when every intent applied."""

    success: bool
    successful_intents: int
    failed_intents: List[FailedIntent] = Field(default_factory=list)
    applied_intents: List[AppliedIntent] = Field(default_factory=list)
    text: str = ""
    metadata: EditMetadata | None = None

    def to_payload(self) -> Dict[str, Any]:
        """camelCase dict for callers; the document text is left out."""

        return self.model_dump(by_alias=True, exclude={"text"}, mode="json")


__all__ = ["AppliedIntent", "EditMetadata", "EditResponse", "FailedIntent", "IntentError"]
