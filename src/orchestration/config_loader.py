from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict

import yaml

from src.models.configs import EditorConfig
from src.models.intent import EditRequest


def _load_structured_file(path: Path) -> Dict[str, Any]:
    """Read an editor config or edit-request batch from YAML, TOML or JSON."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if ext in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif ext == ".toml":
        data = tomllib.loads(text)
    elif ext == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config format '{ext}' for {path}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def load_editor_config(path: Path) -> EditorConfig:
    raw = _load_structured_file(path)
    return EditorConfig.model_validate(raw.get("editor", raw))


def load_edit_request(path: Path) -> EditRequest:
    """Load a batch request; intents stay raw until the executor validates them."""

    return EditRequest.model_validate(_load_structured_file(path))


__all__ = ["load_edit_request", "load_editor_config"]
