"""Core data models for the resolved type graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from .logging import get_logger, kv

_MAX_INLINE_ROUNDS = 100

logger = get_logger("models")


class TypeKind(str, Enum):
    """Closed set of node kinds produced by the resolver."""

    UNKNOWN = "unknown"
    BASIC = "basic"
    STRUCT = "struct"
    ALIAS = "alias"
    POINTER = "pointer"
    SLICE = "slice"
    MAP = "map"
    INTERFACE = "interface"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, order=True)
class NamespaceVersion:
    """A logical namespace paired with an API version."""

    namespace: str
    version: str

    def __str__(self) -> str:
        if not self.namespace:
            return self.version
        return f"{self.namespace}/{self.version}"


@dataclass(frozen=True)
class RootKind:
    """Identity of a root object: namespace, version and kind name."""

    namespace: str
    version: str
    kind: str

    @property
    def namespace_version(self) -> NamespaceVersion:
        return NamespaceVersion(self.namespace, self.version)


@dataclass(eq=False)
class Field:
    """A struct member as it should be documented."""

    name: str
    type: Optional["TypeNode"] = None
    doc: str = ""
    embedded: bool = False
    inlined: bool = False


@dataclass(eq=False)
class TypeNode:
    """One distinct type in the graph; compared and hashed by object identity."""

    identity: str
    name: str = ""
    namespace: str = ""
    doc: str = ""
    kind: TypeKind = TypeKind.UNKNOWN
    underlying_type: Optional["TypeNode"] = None
    key_type: Optional["TypeNode"] = None
    value_type: Optional["TypeNode"] = None
    fields: List[Field] = field(default_factory=list)
    root_kind: Optional[RootKind] = None
    references: List["TypeNode"] = field(default_factory=list)
    imported: bool = False

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    def __repr__(self) -> str:
        return f"TypeNode({self.identity!r}, kind={self.kind.value})"

    def is_basic(self) -> bool:
        if self.kind is TypeKind.BASIC:
            return True
        if self.kind in (TypeKind.SLICE, TypeKind.POINTER) and self.underlying_type is not None:
            return self.underlying_type.is_basic()
        if self.kind is TypeKind.MAP:
            return bool(
                self.key_type is not None
                and self.value_type is not None
                and self.key_type.is_basic()
                and self.value_type.is_basic()
            )
        return False

    def contains_inlined_types(self) -> bool:
        return any(f.inlined for f in self.fields)


class TypeMap(Dict[str, TypeNode]):
    """Canonical identity -> node table for a single run."""

    def inline_types(self, propagate: Callable[[TypeNode, TypeNode], None]) -> int:
        """Splice the fields of inlined embedded types into their parents.

        If C is inlined in B and B in A, C must land in B before B lands in A,
        so a type is only inlined once it has no inlined fields left. Each
        round handles at least one level. ``propagate(embedded, parent)`` is
        called for every splice. Returns the number of inlined fields left
        unresolved (0 on success).
        """
        remaining = 0
        for _ in range(_MAX_INLINE_ROUNDS):
            remaining = 0
            for node in list(self.values()):
                # Walk backwards so splicing at index i leaves earlier indices intact.
                for index in range(len(node.fields) - 1, -1, -1):
                    member = node.fields[index]
                    if not member.inlined:
                        continue
                    remaining += 1

                    embedded = self._embedded_target(member)
                    if embedded is None:
                        logger.warning(
                            "Unable to find embedded type %s",
                            kv(type=node.identity, field=member.name),
                        )
                        continue

                    if embedded.contains_inlined_types():
                        continue
                    logger.debug(
                        "Inlining embedded type %s",
                        kv(type=node.identity, embedded=embedded.identity),
                    )
                    node.fields[index : index + 1] = list(embedded.fields)
                    propagate(embedded, node)
            if remaining == 0:
                return 0
        logger.warning("Failed to inline all inlined types %s", kv(remaining=remaining))
        return remaining

    def _embedded_target(self, member: Field) -> Optional[TypeNode]:
        if member.type is None:
            return None
        target = self.get(member.type.identity)
        while target is not None and target.kind is TypeKind.POINTER:
            if target.underlying_type is None:
                return None
            target = self.get(target.underlying_type.identity)
        return target


@dataclass
class NamespaceVersionGroup:
    """Root kinds and types documented under one namespace/version."""

    namespace_version: NamespaceVersion
    doc: str = ""
    kinds: Set[str] = field(default_factory=set)
    types: Dict[str, TypeNode] = field(default_factory=dict)

    @property
    def namespace(self) -> str:
        return self.namespace_version.namespace

    @property
    def version(self) -> str:
        return self.namespace_version.version

    def sorted_kinds(self) -> List[str]:
        return sorted(self.kinds)

    def sorted_types(self) -> List[TypeNode]:
        return [self.types[name] for name in sorted(self.types)]

    def type_for_kind(self, kind: str) -> Optional[TypeNode]:
        if kind not in self.kinds:
            return None
        return self.types.get(kind)

    def __str__(self) -> str:
        return str(self.namespace_version)


__all__ = [
    "Field",
    "NamespaceVersion",
    "NamespaceVersionGroup",
    "RootKind",
    "TypeKind",
    "TypeMap",
    "TypeNode",
]
