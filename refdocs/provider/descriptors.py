"""Descriptor model surfaced by source-analysis providers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

_TAG_PAIR = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')


class NativeKind(str, Enum):
    """Kinds of raw type descriptors a provider can report."""

    NAMED = "named"
    STRUCT = "struct"
    POINTER = "pointer"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    BASIC = "basic"
    INTERFACE = "interface"
    SIGNATURE = "signature"
    CHAN = "chan"


@dataclass(eq=False)
class MemberDescriptor:
    """A declared struct member; ``name`` is empty for embedded members."""

    name: str
    type: Optional["TypeDescriptor"]
    doc: str = ""
    tag: str = ""


@dataclass(eq=False)
class TypeDescriptor:
    """Provider-side representation of a type.

    Named descriptors carry their defining package and the declared
    right-hand side in ``origin``; composite descriptors carry ``elem``
    (pointer, slice, array, map value, channel), ``key`` (map) or
    ``members`` (struct).
    """

    kind: NativeKind
    name: str = ""
    package: str = ""
    elem: Optional["TypeDescriptor"] = None
    key: Optional["TypeDescriptor"] = None
    length: Optional[int] = None
    members: List[MemberDescriptor] = field(default_factory=list)
    origin: Optional["TypeDescriptor"] = None

    @property
    def underlying(self) -> Optional["TypeDescriptor"]:
        """The non-named representation behind this descriptor."""
        if self.kind is not NativeKind.NAMED:
            return self
        seen = {id(self)}
        target = self.origin
        while target is not None and target.kind is NativeKind.NAMED:
            if id(target) in seen:
                return None
            seen.add(id(target))
            target = target.origin
        return target

    def type_string(self, relative_to: Optional[str] = None) -> str:
        """Render the type; names from ``relative_to`` are left unqualified."""
        kind = self.kind
        if kind is NativeKind.NAMED:
            if not self.package or self.package == relative_to:
                return self.name
            return f"{self.package}.{self.name}"
        if kind is NativeKind.BASIC:
            return self.name
        if kind is NativeKind.POINTER:
            return "*" + _elem_string(self.elem, relative_to)
        if kind is NativeKind.SLICE:
            return "[]" + _elem_string(self.elem, relative_to)
        if kind is NativeKind.ARRAY:
            return f"[{self.length or 0}]" + _elem_string(self.elem, relative_to)
        if kind is NativeKind.MAP:
            key = _elem_string(self.key, relative_to)
            return f"map[{key}]" + _elem_string(self.elem, relative_to)
        if kind is NativeKind.CHAN:
            return "chan " + _elem_string(self.elem, relative_to)
        if kind is NativeKind.STRUCT:
            parts = []
            for member in self.members:
                text = _elem_string(member.type, relative_to)
                if member.name:
                    text = f"{member.name} {text}"
                if member.tag:
                    text = f"{text} {quote_tag(member.tag)}"
                parts.append(text)
            return "struct{" + "; ".join(parts) + "}"
        if kind is NativeKind.INTERFACE:
            return self.name or "interface{}"
        if kind is NativeKind.SIGNATURE:
            return self.name or "func()"
        raise ValueError(f"unhandled descriptor kind: {kind}")

    def __str__(self) -> str:
        return self.type_string()


def _elem_string(descriptor: Optional[TypeDescriptor], relative_to: Optional[str]) -> str:
    if descriptor is None:
        return "invalid type"
    return descriptor.type_string(relative_to)


def quote_tag(tag: str) -> str:
    return '"' + tag.replace("\\", "\\\\").replace('"', '\\"') + '"'


def lookup_tag(tag: str, key: str) -> Optional[str]:
    """Look up ``key`` in a conventional ``key:"value" other:"value"`` struct tag."""
    for match in _TAG_PAIR.finditer(tag or ""):
        if match.group(1) == key:
            return re.sub(r"\\(.)", r"\1", match.group(2))
    return None


@dataclass(frozen=True)
class Documentation:
    """Documentation for a declaration; ``raw`` keeps the verbatim comment."""

    text: str
    raw: Optional[str] = None


@dataclass(eq=False)
class TypeDeclaration:
    """A top-level type declared in a package."""

    name: str
    descriptor: TypeDescriptor
    doc: Optional[Documentation] = None
    markers: Dict[str, Any] = field(default_factory=dict)

    @property
    def exported(self) -> bool:
        return bool(self.name) and self.name[0].isupper()


@dataclass(eq=False)
class Package:
    """A unit of declarations sharing one import path."""

    path: str
    name: str
    doc_comments: List[str] = field(default_factory=list)
    markers: Dict[str, Any] = field(default_factory=dict)
    imports: Dict[str, str] = field(default_factory=dict)
    declarations: Dict[str, TypeDeclaration] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def __str__(self) -> str:
        return self.path


__all__ = [
    "Documentation",
    "MemberDescriptor",
    "NativeKind",
    "Package",
    "TypeDeclaration",
    "TypeDescriptor",
    "lookup_tag",
    "quote_tag",
]
