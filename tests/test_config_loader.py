import json

import pytest

from src.models.configs import EditorConfig
from src.orchestration.config_loader import load_edit_request, load_editor_config
from src.settings import Settings


def test_load_editor_config_from_yaml(tmp_path):
    path = tmp_path / "editor.yaml"
    path.write_text("editor:\n  anchor_window: 3\n  strict_matching: true\n  max_depth: 4\n", encoding="utf-8")

    config = load_editor_config(path)

    assert config.anchor_window == 3
    assert config.strict_matching is True
    assert config.locator_config().anchor_window == 3
    assert config.parser_config().max_depth == 4
    assert config.parser_config().skip_front_matter is True


def test_load_editor_config_from_toml_top_level(tmp_path):
    path = tmp_path / "editor.toml"
    path.write_text("write_partial_results = true\nstrip_number_prefix = false\n", encoding="utf-8")

    config = load_editor_config(path)

    assert config.write_partial_results is True
    assert config.parser_config().strip_number_prefix is False


def test_load_edit_request_from_json(tmp_path):
    path = tmp_path / "batch.json"
    path.write_text(
        json.dumps(
            {
                "targetFile": "srs.md",
                "intents": [{"type": "append_to_section", "target": {"sid": "/a"}, "content": "x"}],
            }
        ),
        encoding="utf-8",
    )

    request = load_edit_request(path)

    assert request.target_file == "srs.md"
    assert request.intents[0]["type"] == "append_to_section"


def test_loader_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_editor_config(tmp_path / "missing.yaml")

    unsupported = tmp_path / "editor.ini"
    unsupported.write_text("[editor]\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported config format"):
        load_editor_config(unsupported)

    not_mapping = tmp_path / "editor.yml"
    not_mapping.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_editor_config(not_mapping)


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "editor.yaml"
    path.write_text("", encoding="utf-8")

    assert load_editor_config(path) == EditorConfig()


def test_settings_read_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("EDITOR_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("EDITOR_ANCHOR_WINDOW", "4")
    monkeypatch.setenv("EDITOR_STRICT_MATCHING", "true")
    monkeypatch.setenv("EDITOR_MAX_DEPTH", "9")
    monkeypatch.setenv("EDITOR_WRITE_PARTIAL", "0")

    settings = Settings()
    config = settings.to_editor_config()

    assert settings.base_dir == tmp_path
    assert config.anchor_window == 4
    assert config.strict_matching is True
    assert config.max_depth == 6
    assert config.write_partial_results is False


def test_settings_reject_negative_window(monkeypatch):
    monkeypatch.setenv("EDITOR_ANCHOR_WINDOW", "-1")

    with pytest.raises(ValueError):
        Settings()
