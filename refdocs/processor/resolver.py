"""Recursive, memoized resolution of descriptors into type nodes."""

from __future__ import annotations

from typing import Optional

from ..logging import get_logger, kv
from ..models import TypeKind, TypeNode
from ..provider import ImportResolutionError, NativeKind, Package, SourceProvider, TypeDescriptor
from .context import ResolverContext
from .fields import FieldExtractor
from .identity import make_node

logger = get_logger("processor.resolver")


class TypeResolver:
    """Turns provider descriptors into canonical :class:`TypeNode` objects.

    Every node is registered under its identity before nested structure is
    resolved, so re-entering a type that is still being resolved returns the
    in-progress node. Indirection (pointer, slice, array, map, named
    underlying) increments the depth; struct members do not. Past
    ``max_depth`` a node degrades to UNKNOWN and is left unregistered.
    """

    def __init__(self, context: ResolverContext, provider: SourceProvider) -> None:
        self.context = context
        self.provider = provider
        self.fields = FieldExtractor(self)

    def resolve(
        self,
        package: Package,
        parent: Optional[TypeNode],
        descriptor: Optional[TypeDescriptor],
        depth: int,
    ) -> Optional[TypeNode]:
        """Resolve ``descriptor``; returns None when a struct was absorbed into ``parent``."""
        if descriptor is None:
            logger.warning("Failed to determine type %s", kv(package=package.path))
            return TypeNode(identity="", kind=TypeKind.UNKNOWN)

        node = make_node(package, descriptor)
        absorbing = (
            descriptor.kind is NativeKind.STRUCT
            and parent is not None
            and parent.kind is TypeKind.ALIAS
        )
        if not absorbing:
            existing = self.context.lookup(node.identity)
            if existing is not None:
                return existing

        if not node.imported:
            self._attach_doc(package, node)

        if depth > self.context.max_depth:
            logger.debug(
                "Not loading type due to reaching max recursion depth %s",
                kv(type=node.identity, depth=depth),
            )
            node.kind = TypeKind.UNKNOWN
            if descriptor.kind is NativeKind.STRUCT:
                node.name = ""
                node.namespace = ""
            if parent is not None and parent.kind is TypeKind.ALIAS:
                # The named parent is incomplete until resolved from a shallower path.
                self.context.mark_truncated(parent.identity)
            return node

        logger.debug("Load %s", kv(package=node.namespace, name=node.name))

        kind = descriptor.kind
        if kind is NativeKind.NAMED:
            return self._resolve_named(package, node, descriptor, depth)
        if kind is NativeKind.STRUCT:
            if absorbing and parent is not None:
                # Collapse Named -> Struct into the single parent node.
                parent.kind = TypeKind.STRUCT
                self.fields.extract(parent, package, descriptor.members, depth)
                return None
            logger.warning(
                "Anonymous structs are not supported %s",
                kv(package=package.path, type=node.identity),
            )
            node.name = ""
            node.namespace = ""
            node.kind = TypeKind.UNSUPPORTED
            return self.context.register(node)

        self.context.register(node)
        if kind is NativeKind.POINTER:
            node.kind = TypeKind.POINTER
            self._resolve_element(package, node, descriptor, depth)
        elif kind in (NativeKind.SLICE, NativeKind.ARRAY):
            node.kind = TypeKind.SLICE
            self._resolve_element(package, node, descriptor, depth)
        elif kind is NativeKind.MAP:
            node.kind = TypeKind.MAP
            node.key_type = self.resolve(package, node, descriptor.key, depth + 1)
            node.value_type = self.resolve(package, node, descriptor.elem, depth + 1)
            if node.value_type is not None:
                node.namespace = node.value_type.namespace
        elif kind is NativeKind.BASIC:
            node.kind = TypeKind.BASIC
            node.namespace = ""
        elif kind is NativeKind.INTERFACE:
            node.kind = TypeKind.INTERFACE
        elif kind in (NativeKind.SIGNATURE, NativeKind.CHAN):
            node.kind = TypeKind.UNSUPPORTED
        else:
            raise ValueError(f"unhandled descriptor kind: {kind}")
        return node

    def resolve_again(
        self, package: Package, node: TypeNode, descriptor: TypeDescriptor
    ) -> TypeNode:
        """Re-resolve a depth-truncated named node in place at depth 0.

        The node object is kept, so fields and edges that already point at
        it stay canonical.
        """
        logger.debug("Resolving truncated type again %s", kv(type=node.identity))
        self.context.clear_truncated(node.identity)
        node.kind = TypeKind.UNKNOWN
        node.underlying_type = None
        node.fields = []
        return self._resolve_named(package, node, descriptor, 0)

    def _resolve_named(
        self, package: Package, node: TypeNode, descriptor: TypeDescriptor, depth: int
    ) -> TypeNode:
        if package.path != node.namespace:
            try:
                package = self.provider.resolve_import(package, node.namespace)
            except ImportResolutionError as exc:
                logger.warning(
                    "Imported type cannot be found %s",
                    kv(name=node.name, package=node.namespace, reason=str(exc)),
                )
                return node
            self._attach_doc(package, node)

        node.kind = TypeKind.ALIAS
        self.context.register(node)
        node.underlying_type = self.resolve(package, node, descriptor.underlying, depth + 1)
        self.context.add_reference(node, node.underlying_type)
        return node

    def _resolve_element(
        self, package: Package, node: TypeNode, descriptor: TypeDescriptor, depth: int
    ) -> None:
        node.underlying_type = self.resolve(package, node, descriptor.elem, depth + 1)
        if node.underlying_type is not None:
            node.namespace = node.underlying_type.namespace

    def _attach_doc(self, package: Package, node: TypeNode) -> None:
        if not node.name:
            return
        documentation = self.provider.lookup_documentation(package, node.name)
        if documentation is None:
            return
        node.doc = documentation.text
        if self.context.use_raw_docstring and documentation.raw is not None:
            # Keep line breaks and indentation of the original comment.
            node.doc = documentation.raw.rstrip("\n")


__all__ = ["TypeResolver"]
