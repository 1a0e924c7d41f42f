"""Canonical type identity and unresolved node construction."""

from __future__ import annotations

import re

from ..models import TypeNode
from ..provider.descriptors import Package, TypeDescriptor

# Leading pointer, slice and array markers of a relative type string.
_INDIRECTION_PREFIX = re.compile(r"^(?:\*|\[\d*\])+")


def identity_of(descriptor: TypeDescriptor) -> str:
    """Fully qualified type string; equal strings denote the same type."""
    return descriptor.type_string()


def make_node(package: Package, descriptor: TypeDescriptor) -> TypeNode:
    """Build the unresolved node for ``descriptor`` as seen from ``package``.

    A qualified name outside ``package`` marks the node as imported and
    supplies its namespace. Anonymous struct literals may contain dots in
    member types and are never treated as imported.
    """
    relative = descriptor.type_string(relative_to=package.path)
    name = _INDIRECTION_PREFIX.sub("", relative)

    node = TypeNode(identity=identity_of(descriptor), name=name, namespace=package.path)

    dot = name.rfind(".")
    if not name.startswith("struct{") and dot >= 0:
        node.name = name[dot + 1 :]
        node.namespace = name[:dot]
        node.imported = True

    return node


__all__ = ["identity_of", "make_node"]
