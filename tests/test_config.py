"""Tests for refdocs.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from refdocs.config import (
    DEFAULT_FIELD_NAME_TAG,
    DEFAULT_MAX_DEPTH,
    ConfigError,
    RefDocsConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, RefDocsConfig)
    assert config.root == tmp_path.resolve()
    assert config.source_path is None
    assert config.processor.max_depth == DEFAULT_MAX_DEPTH
    assert config.processor.ignore_types == []
    assert config.processor.ignore_fields == []
    assert config.processor.ignore_namespace_versions == []
    assert config.processor.use_raw_docstring is False
    assert config.processor.field_name_tag == DEFAULT_FIELD_NAME_TAG


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".refdocs.yml"
    config_file.write_text(
        """
source_path: "api"
processor:
  max_depth: 4
  ignore_types:
    - "List$"
  ignore_fields:
    - "TypeMeta$"
    - "\\\\.status$"
  ignore_namespace_versions: "internal"
  use_raw_docstring: true
  field_name_tag: "yaml"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.source_path == tmp_path.resolve() / "api"
    assert config.processor.max_depth == 4
    assert config.processor.ignore_types == ["List$"]
    assert config.processor.ignore_fields == ["TypeMeta$", "\\.status$"]
    assert config.processor.ignore_namespace_versions == ["internal"]
    assert config.processor.use_raw_docstring is True
    assert config.processor.field_name_tag == "yaml"


def test_load_config_accepts_directory(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("processor:\n  max_depth: 2\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.processor.max_depth == 2


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.processor.max_depth == DEFAULT_MAX_DEPTH


def test_load_config_rejects_negative_depth(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("processor:\n  max_depth: -1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("processor: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_load_config_ignores_boolean_depth(tmp_path: Path) -> None:
    (tmp_path / ".refdocs.yml").write_text("processor:\n  max_depth: true\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.processor.max_depth == DEFAULT_MAX_DEPTH
