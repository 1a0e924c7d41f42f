"""Configuration loading for refdocs (.refdocs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".refdocs.yml"
DEFAULT_MAX_DEPTH = 10
DEFAULT_FIELD_NAME_TAG = "json"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProcessorConfig:
    """Resolver limits and exclusion policy from the ``processor`` section."""

    max_depth: int = DEFAULT_MAX_DEPTH
    ignore_types: List[str] = field(default_factory=list)
    ignore_fields: List[str] = field(default_factory=list)
    ignore_namespace_versions: List[str] = field(default_factory=list)
    use_raw_docstring: bool = False
    field_name_tag: str = DEFAULT_FIELD_NAME_TAG


@dataclass
class RefDocsConfig:
    """Represents the high-level settings defined in .refdocs.yml."""

    root: Path
    source_path: Optional[Path] = None
    processor: ProcessorConfig = field(default_factory=ProcessorConfig)


def load_config(config_path: Path) -> RefDocsConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RefDocsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    source_str = _as_str(data.get("source_path"))
    source_path = root / source_str if source_str else None

    processor = ProcessorConfig()
    processor_data = _as_dict(data.get("processor"))
    if processor_data:
        max_depth = _as_int(processor_data.get("max_depth"))
        if max_depth is not None:
            if max_depth < 0:
                raise ConfigError("processor.max_depth must not be negative")
            processor.max_depth = max_depth
        processor.ignore_types = _as_str_list(processor_data.get("ignore_types"))
        processor.ignore_fields = _as_str_list(processor_data.get("ignore_fields"))
        processor.ignore_namespace_versions = _as_str_list(
            processor_data.get("ignore_namespace_versions")
        )
        processor.use_raw_docstring = _as_bool(processor_data.get("use_raw_docstring")) or False
        tag = _as_str(processor_data.get("field_name_tag"))
        if tag:
            processor.field_name_tag = tag

    return RefDocsConfig(root=root, source_path=source_path, processor=processor)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_FIELD_NAME_TAG",
    "DEFAULT_MAX_DEPTH",
    "ProcessorConfig",
    "RefDocsConfig",
    "load_config",
]
