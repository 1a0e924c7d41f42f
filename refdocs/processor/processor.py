"""Namespace/version discovery, graph assembly and filtering."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..config import RefDocsConfig
from ..logging import get_logger, kv
from ..models import (
    NamespaceVersion,
    NamespaceVersionGroup,
    RootKind,
    TypeKind,
    TypeNode,
)
from ..provider import Package, ProviderError, SourceProvider
from .context import ResolverContext
from .errors import ProcessingError
from .resolver import TypeResolver

NAMESPACE_MARKER = "groupName"
VERSION_MARKER = "versionName"
OBJECT_ROOT_MARKER = "kubebuilder:object:root"

# Marker lines and licence headers do not belong in package documentation.
_IGNORED_COMMENT = re.compile(r"^\s*(?:\+|(?i:copyright))")

logger = get_logger("processor")


@dataclass
class _GroupInfo:
    namespace_version: NamespaceVersion
    package: Package
    doc: str = ""
    kinds: Set[str] = field(default_factory=set)
    types: Dict[str, TypeNode] = field(default_factory=dict)


class Processor:
    """Scans provider packages and assembles sorted namespace/version groups."""

    def __init__(
        self,
        provider: SourceProvider,
        context: Optional[ResolverContext] = None,
    ) -> None:
        self.provider = provider
        self.context = context or ResolverContext()
        self.resolver = TypeResolver(self.context, provider)
        self._groups: Dict[NamespaceVersion, _GroupInfo] = {}

    def run(self, source_path: Path) -> List[NamespaceVersionGroup]:
        """Resolve every annotated package under ``source_path``."""
        logger.info("Processing API types in %s", source_path)
        try:
            self.find_api_types(source_path)
        except ProviderError as exc:
            raise ProcessingError(
                f"failed to find API types in directory {source_path}: {exc}"
            ) from exc

        groups = self.assemble()
        logger.info(
            "Resolved %s",
            kv(groups=len(groups), types=len(self.context.types)),
        )
        return groups

    # ------------------------------------------------------------------
    # Scanning

    def find_api_types(self, source_path: Path) -> None:
        policy = self.context.policy
        for package in self.provider.load_packages(source_path):
            info = self._extract_namespace_version(package)
            if info is None:
                continue

            if policy.should_ignore_namespace_version(str(info.namespace_version)):
                logger.debug("Skipping excluded namespace/version %s", kv(group=str(info.namespace_version)))
                continue

            # Packages sharing a namespace/version contribute to one group.
            info = self._groups.setdefault(info.namespace_version, info)

            for declaration in self.provider.list_declared_types(package):
                identity = f"{package.path}.{declaration.name}"
                if policy.should_ignore_type(identity):
                    logger.debug("Skipping excluded type %s", kv(type=identity))
                    continue
                if not declaration.exported:
                    continue

                node = self.context.lookup(identity)
                if node is None:
                    node = self.resolver.resolve(package, None, declaration.descriptor, 0)
                elif self.context.is_truncated(identity):
                    node = self.resolver.resolve_again(package, node, declaration.descriptor)
                if node is None:
                    continue

                if node.kind is not TypeKind.BASIC:
                    info.types[declaration.name] = node

                markers = self.provider.type_markers(package, declaration.name)
                if OBJECT_ROOT_MARKER in markers and markers[OBJECT_ROOT_MARKER] is not False:
                    info.kinds.add(declaration.name)
                    node.root_kind = RootKind(
                        namespace=info.namespace_version.namespace,
                        version=info.namespace_version.version,
                        kind=declaration.name,
                    )

            for error in package.errors:
                logger.warning("Package error %s", kv(package=package.path, error=error))

    def _extract_namespace_version(self, package: Package) -> Optional[_GroupInfo]:
        markers = self.provider.package_markers(package)
        namespace = markers.get(NAMESPACE_MARKER)
        if namespace is None:
            return None

        version = markers.get(VERSION_MARKER) or package.name
        return _GroupInfo(
            namespace_version=NamespaceVersion(str(namespace), str(version)),
            package=package,
            doc=self._package_documentation(package),
        )

    def _package_documentation(self, package: Package) -> str:
        lines: List[str] = []
        for comment in self.provider.package_doc_comments(package):
            for line in comment.split("\n"):
                if not _IGNORED_COMMENT.match(line):
                    lines.append(line)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Assembly

    def assemble(self) -> List[NamespaceVersionGroup]:
        types = self.context.types
        policy = self.context.policy
        references = self.context.references

        types.inline_types(self.context.propagate_reference)
        references.settle()
        references.materialize(types, lambda node: not policy.should_ignore_type(node.identity))

        groups: List[NamespaceVersionGroup] = []
        for info in self._groups.values():
            group = NamespaceVersionGroup(
                namespace_version=info.namespace_version,
                doc=info.doc,
                kinds=set(info.kinds),
            )
            for name, node in info.types.items():
                if policy.should_ignore_type(node.identity):
                    logger.debug("Skipping excluded type %s", kv(type=name))
                    continue
                canonical = types.get(node.identity)
                if canonical is None:
                    raise ProcessingError(
                        f"type not loaded: {node.identity} (package {info.package.path})"
                    )
                group.types[name] = canonical
            groups.append(group)

        groups.sort(key=lambda group: (group.namespace, group.version))
        return groups


def process(config: RefDocsConfig, provider: SourceProvider) -> List[NamespaceVersionGroup]:
    """Run a full resolution pass using ``config``."""
    source_path = config.source_path or config.root
    processor = Processor(provider, ResolverContext.from_config(config.processor))
    return processor.run(source_path)


__all__ = [
    "NAMESPACE_MARKER",
    "OBJECT_ROOT_MARKER",
    "Processor",
    "VERSION_MARKER",
    "process",
]
