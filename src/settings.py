from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.models.configs import EditorConfig

load_dotenv(override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() not in {"0", "false", "no", ""}


class Settings(BaseModel):
    """Runtime configuration read from the environment (and ``.env``)."""

    base_dir: Path = Field(default_factory=lambda: Path(os.getenv("EDITOR_BASE_DIR", ".")))
    anchor_window: int = Field(default_factory=lambda: int(os.getenv("EDITOR_ANCHOR_WINDOW", "10")))
    strict_matching: bool = Field(default_factory=lambda: _env_flag("EDITOR_STRICT_MATCHING"))
    max_depth: int = Field(default_factory=lambda: int(os.getenv("EDITOR_MAX_DEPTH", "6")))
    write_partial_results: bool = Field(default_factory=lambda: _env_flag("EDITOR_WRITE_PARTIAL"))

    model_config = {
        "frozen": True,
        "validate_default": True,
    }

    @field_validator("max_depth")
    @classmethod
    def _clamp_depth(cls, value: int) -> int:
        return max(1, min(value, 6))

    @field_validator("anchor_window")
    @classmethod
    def _non_negative_window(cls, value: int) -> int:
        if value < 0:
            raise ValueError("EDITOR_ANCHOR_WINDOW must not be negative")
        return value

    def to_editor_config(self) -> EditorConfig:
        return EditorConfig(
            anchor_window=self.anchor_window,
            strict_matching=self.strict_matching,
            max_depth=self.max_depth,
            write_partial_results=self.write_partial_results,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
