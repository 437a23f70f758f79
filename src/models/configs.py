from __future__ import annotations

from pydantic import BaseModel, Field

from src.editing.locator import LocatorConfig
from src.ingest.markdown import MarkdownTOCBuilderConfig


class EditorConfig(BaseModel):
    """File-level editor settings; split into component configs on demand."""

    anchor_window: int = Field(default=10, ge=0, description="Lines searched after a contextAnchor")
    strict_matching: bool = False
    max_depth: int = Field(default=6, ge=1, le=6)
    skip_front_matter: bool = True
    strip_number_prefix: bool = True
    include_body: bool = True
    write_partial_results: bool = False

    def parser_config(self) -> MarkdownTOCBuilderConfig:
        return MarkdownTOCBuilderConfig(
            max_depth=self.max_depth,
            include_body=self.include_body,
            skip_front_matter=self.skip_front_matter,
            strip_number_prefix=self.strip_number_prefix,
        )

    def locator_config(self) -> LocatorConfig:
        return LocatorConfig(anchor_window=self.anchor_window, strict_matching=self.strict_matching)


__all__ = ["EditorConfig"]
