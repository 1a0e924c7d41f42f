"""Type-graph resolution: from provider descriptors to namespace/version groups."""

from __future__ import annotations

from .context import ResolverContext
from .errors import ProcessingError
from .fields import FieldExtractor
from .filters import ExclusionPolicy
from .identity import identity_of, make_node
from .processor import (
    NAMESPACE_MARKER,
    OBJECT_ROOT_MARKER,
    VERSION_MARKER,
    Processor,
    process,
)
from .references import ReferenceIndex
from .resolver import TypeResolver

__all__ = [
    "ExclusionPolicy",
    "FieldExtractor",
    "NAMESPACE_MARKER",
    "OBJECT_ROOT_MARKER",
    "ProcessingError",
    "Processor",
    "ReferenceIndex",
    "ResolverContext",
    "TypeResolver",
    "VERSION_MARKER",
    "identity_of",
    "make_node",
    "process",
]
