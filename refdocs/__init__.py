"""Cross-referenced type graphs for API reference documentation."""

from __future__ import annotations

from .config import ProcessorConfig, RefDocsConfig, load_config
from .models import (
    Field,
    NamespaceVersion,
    NamespaceVersionGroup,
    RootKind,
    TypeKind,
    TypeMap,
    TypeNode,
)
from .processor import ProcessingError, Processor, process

__version__ = "0.1.0"

__all__ = [
    "Field",
    "NamespaceVersion",
    "NamespaceVersionGroup",
    "ProcessingError",
    "Processor",
    "ProcessorConfig",
    "RefDocsConfig",
    "RootKind",
    "TypeKind",
    "TypeMap",
    "TypeNode",
    "load_config",
    "process",
]
