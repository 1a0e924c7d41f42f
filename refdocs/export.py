"""JSON export of resolved namespace/version groups."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Field, NamespaceVersionGroup, TypeNode

EXPORT_VERSION = 1


def groups_to_dict(groups: Sequence[NamespaceVersionGroup]) -> Dict[str, object]:
    """Serialise groups plus a catalog of every reachable type keyed by identity.

    Edges are written as identities, so cyclic graphs serialise without
    repetition.
    """
    catalog: Dict[str, Dict[str, object]] = {}
    for node in _reachable(node for group in groups for node in group.sorted_types()):
        catalog[node.identity] = _node_to_dict(node)

    return {
        "version": EXPORT_VERSION,
        "groups": [_group_to_dict(group) for group in groups],
        "types": catalog,
    }


def write_json(groups: Sequence[NamespaceVersionGroup], path: Optional[Path] = None) -> str:
    """Render the export; also write it to ``path`` when given."""
    text = json.dumps(groups_to_dict(groups), indent=2, sort_keys=True)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
    return text


def _group_to_dict(group: NamespaceVersionGroup) -> Dict[str, object]:
    roots: Dict[str, str] = {}
    for kind in group.sorted_kinds():
        node = group.type_for_kind(kind)
        if node is not None:
            roots[kind] = node.identity
    return {
        "namespace": group.namespace,
        "version": group.version,
        "doc": group.doc,
        "kinds": group.sorted_kinds(),
        "roots": roots,
        "types": {name: group.types[name].identity for name in sorted(group.types)},
    }


def _node_to_dict(node: TypeNode) -> Dict[str, object]:
    data: Dict[str, object] = {
        "identity": node.identity,
        "name": node.name,
        "namespace": node.namespace,
        "kind": node.kind.value,
        "doc": node.doc,
        "imported": node.imported,
        "basic": node.is_basic(),
        "references": [ref.identity for ref in node.references],
    }
    if node.root_kind is not None:
        data["root_kind"] = {
            "namespace": node.root_kind.namespace,
            "version": node.root_kind.version,
            "kind": node.root_kind.kind,
        }
    if node.underlying_type is not None:
        data["underlying"] = node.underlying_type.identity
    if node.key_type is not None:
        data["key"] = node.key_type.identity
    if node.value_type is not None:
        data["value"] = node.value_type.identity
    if node.fields:
        data["fields"] = [_field_to_dict(f) for f in node.fields]
    return data


def _field_to_dict(member: Field) -> Dict[str, object]:
    return {
        "name": member.name,
        "doc": member.doc,
        "type": member.type.identity if member.type is not None else None,
        "embedded": member.embedded,
        "inlined": member.inlined,
    }


def _reachable(roots: Iterable[TypeNode]) -> List[TypeNode]:
    seen: Dict[int, TypeNode] = {}
    stack = list(roots)
    while stack:
        node = stack.pop()
        if id(node) in seen or not node.identity:
            continue
        seen[id(node)] = node
        for edge in (node.underlying_type, node.key_type, node.value_type):
            if edge is not None:
                stack.append(edge)
        stack.extend(f.type for f in node.fields if f.type is not None)
        stack.extend(node.references)
    return sorted(seen.values(), key=lambda n: n.identity)


__all__ = ["EXPORT_VERSION", "groups_to_dict", "write_json"]
