"""Source-analysis providers and the descriptor model they surface."""

from __future__ import annotations

from .base import ImportResolutionError, ProviderError, SourceProvider
from .descriptors import (
    Documentation,
    MemberDescriptor,
    NativeKind,
    Package,
    TypeDeclaration,
    TypeDescriptor,
    lookup_tag,
)
from .manifest import ManifestProvider

__all__ = [
    "Documentation",
    "ImportResolutionError",
    "ManifestProvider",
    "MemberDescriptor",
    "NativeKind",
    "Package",
    "ProviderError",
    "SourceProvider",
    "TypeDeclaration",
    "TypeDescriptor",
    "lookup_tag",
]
