"""Compiled exclusion policy for types, fields and namespace/versions."""

from __future__ import annotations

import re
from typing import Iterable, List, Pattern

from ..config import ConfigError, ProcessorConfig


def _compile(patterns: Iterable[str], setting: str) -> List[Pattern[str]]:
    compiled: List[Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"Invalid regular expression in {setting}: {pattern!r}: {exc}") from exc
    return compiled


class ExclusionPolicy:
    """Regular-expression exclusions, searched anywhere in the candidate string.

    Types are matched by identity (``<package>.<Name>``), fields by
    ``<type identity>.<field name>`` and namespace/versions by
    ``<namespace>/<version>``.
    """

    def __init__(
        self,
        ignore_types: Iterable[str] = (),
        ignore_fields: Iterable[str] = (),
        ignore_namespace_versions: Iterable[str] = (),
    ) -> None:
        self._types = _compile(ignore_types, "processor.ignore_types")
        self._fields = _compile(ignore_fields, "processor.ignore_fields")
        self._namespace_versions = _compile(
            ignore_namespace_versions, "processor.ignore_namespace_versions"
        )

    @classmethod
    def from_config(cls, config: ProcessorConfig) -> "ExclusionPolicy":
        return cls(
            ignore_types=config.ignore_types,
            ignore_fields=config.ignore_fields,
            ignore_namespace_versions=config.ignore_namespace_versions,
        )

    def should_ignore_type(self, identity: str) -> bool:
        return _matches(self._types, identity)

    def should_ignore_field(self, type_identity: str, field_name: str) -> bool:
        return _matches(self._fields, f"{type_identity}.{field_name}")

    def should_ignore_namespace_version(self, namespace_version: str) -> bool:
        return _matches(self._namespace_versions, namespace_version)


def _matches(patterns: Iterable[Pattern[str]], candidate: str) -> bool:
    return any(pattern.search(candidate) for pattern in patterns)


__all__ = ["ExclusionPolicy"]
