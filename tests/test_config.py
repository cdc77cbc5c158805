"""Tests for configuration file loading and merging."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from codecopier.core import (
    CONFIG_FILENAME,
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    CodeCopierConfig,
    ConfigError,
    load_config,
    resolve_config_path,
)


def _write_config(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data))
    return path


def test_resolve_config_path_default(tmp_path: Path) -> None:
    assert resolve_config_path(tmp_path) == tmp_path / CONFIG_FILENAME


def test_resolve_config_path_explicit(tmp_path: Path) -> None:
    explicit = tmp_path / "custom.json"
    assert resolve_config_path(tmp_path / "elsewhere", explicit) == explicit.resolve()


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / CONFIG_FILENAME)
    assert config == CodeCopierConfig()
    assert config.include == DEFAULT_INCLUDE
    assert config.exclude == DEFAULT_EXCLUDE


def test_defaults_are_not_shared() -> None:
    first = CodeCopierConfig()
    first.include.append("*.md")
    assert CodeCopierConfig().include == DEFAULT_INCLUDE


def test_both_keys_override(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"include": ["*.md"], "exclude": ["docs/**"]})
    config = load_config(path)
    assert config.include == ["*.md"]
    assert config.exclude == ["docs/**"]


def test_only_present_keys_override(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"exclude": ["build/**"]})
    config = load_config(path)
    assert config.exclude == ["build/**"]
    # Absent key keeps its default
    assert config.include == DEFAULT_INCLUDE


def test_empty_lists_are_valid(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"exclude": []})
    assert load_config(path).exclude == []


def test_unknown_keys_ignored(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"colors": True})
    assert load_config(path) == CodeCopierConfig()


def test_exclude_not_an_array(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"exclude": "notAnArray"})
    with pytest.raises(ConfigError, match="exclude"):
        load_config(path)


def test_include_with_non_string_pattern(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, {"include": ["*.py", 3]})
    with pytest.raises(ConfigError, match="include"):
        load_config(path)


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="parse"):
        load_config(path)


def test_top_level_must_be_object(tmp_path: Path) -> None:
    path = _write_config(tmp_path / CONFIG_FILENAME, ["*.py"])
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(path)


def test_config_path_is_directory(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.mkdir()
    with pytest.raises(ConfigError, match="not a file"):
        load_config(path)
