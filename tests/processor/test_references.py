"""Tests for the reverse reference index."""

from __future__ import annotations

import pytest

from refdocs.models import TypeKind, TypeMap, TypeNode
from refdocs.processor import ProcessingError, ReferenceIndex


def _node(identity: str, kind: TypeKind = TypeKind.STRUCT, **kwargs: object) -> TypeNode:
    return TypeNode(identity=identity, name=identity.rsplit(".", 1)[-1], kind=kind, **kwargs)


def test_add_unwraps_wrappers_and_skips_untracked_kinds() -> None:
    index = ReferenceIndex()
    owner = _node("pkg.Owner")
    entry = _node("pkg.Entry")
    rating = _node("pkg.Rating", TypeKind.ALIAS)
    string = _node("string", TypeKind.BASIC)
    pointer = _node("*pkg.Entry", TypeKind.POINTER, underlying_type=entry)
    slice_of_pointer = _node("[]*pkg.Entry", TypeKind.SLICE, underlying_type=pointer)
    mapping = _node("map[pkg.Rating]string", TypeKind.MAP, key_type=rating, value_type=string)

    index.add(owner, slice_of_pointer)
    index.add(owner, mapping)
    index.add(owner, string)
    index.add(owner, None)

    assert index.parents_of("pkg.Entry") == ["pkg.Owner"]
    assert index.parents_of("pkg.Rating") == ["pkg.Owner"]
    assert "string" not in index
    assert len(index) == 2


def test_add_skips_ignored_identities() -> None:
    index = ReferenceIndex(ignore=lambda identity: identity.endswith("List"))
    item = _node("pkg.Item")

    index.add(_node("pkg.ItemList"), item)
    index.add(item, _node("pkg.ItemList"))

    assert len(index) == 0


def test_propagation_settles_regardless_of_order() -> None:
    outer, middle, inner, leaf = (_node(f"pkg.{name}") for name in ("Outer", "Middle", "Inner", "Leaf"))

    def build(order: str) -> ReferenceIndex:
        index = ReferenceIndex()
        index.add(middle, inner)
        index.add(inner, leaf)
        propagations = [(middle, outer), (inner, middle)]
        if order == "reversed":
            propagations.reverse()
        for original, additional in propagations:
            index.propagate(original, additional)
        index.settle()
        return index

    for order in ("forward", "reversed"):
        index = build(order)
        assert index.parents_of("pkg.Inner") == ["pkg.Middle", "pkg.Outer"]
        assert index.parents_of("pkg.Leaf") == ["pkg.Inner", "pkg.Middle", "pkg.Outer"]


def test_materialize_orders_and_filters_references() -> None:
    index = ReferenceIndex()
    child = _node("pkg.Child")
    zeta, alpha, hidden = _node("pkg.Zeta"), _node("pkg.Alpha"), _node("pkg.Hidden")
    for parent in (zeta, alpha, hidden):
        index.add(parent, child)
    types = TypeMap({n.identity: n for n in (child, zeta, alpha, hidden)})

    index.materialize(types, lambda node: node is not hidden)

    assert child.references == [alpha, zeta]


def test_materialize_raises_for_unregistered_child() -> None:
    index = ReferenceIndex()
    index.add(_node("pkg.Parent"), _node("pkg.Ghost"))

    with pytest.raises(ProcessingError, match="pkg.Ghost"):
        index.materialize(TypeMap(), lambda node: True)
