"""Base classes for source-analysis providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .descriptors import Documentation, MemberDescriptor, Package, TypeDeclaration, lookup_tag


class ProviderError(RuntimeError):
    """Raised when a provider cannot enumerate or load the requested packages."""


class ImportResolutionError(ProviderError):
    """Raised when an imported package cannot be located."""


class SourceProvider(ABC):
    """Contract for providers that surface resolved type descriptors."""

    @abstractmethod
    def load_packages(self, source_path: Path) -> List[Package]:
        """Return every package found under ``source_path``."""

    @abstractmethod
    def list_declared_types(self, package: Package) -> List[TypeDeclaration]:
        """Return the package's type declarations in declaration order."""

    @abstractmethod
    def lookup_documentation(self, package: Package, type_name: str) -> Optional[Documentation]:
        """Return documentation for ``type_name`` declared in ``package``."""

    @abstractmethod
    def package_markers(self, package: Package) -> Mapping[str, Any]:
        """Return marker name -> value annotations attached to the package."""

    @abstractmethod
    def type_markers(self, package: Package, type_name: str) -> Mapping[str, Any]:
        """Return marker name -> value annotations attached to a type."""

    @abstractmethod
    def resolve_import(self, package: Package, import_path: str) -> Package:
        """Return the package imported by ``package`` under ``import_path``."""

    def package_doc_comments(self, package: Package) -> List[str]:
        return list(package.doc_comments)

    def field_tag_value(self, member: MemberDescriptor, key: str) -> Optional[str]:
        return lookup_tag(member.tag, key)


__all__ = ["ImportResolutionError", "ProviderError", "SourceProvider"]
