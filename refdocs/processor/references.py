"""Reverse reference index: which types contain a given type."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set, Tuple

from ..logging import get_logger, kv
from ..models import TypeKind, TypeMap, TypeNode
from .errors import ProcessingError

logger = get_logger("processor.references")

_TRACKED_KINDS = (TypeKind.ALIAS, TypeKind.STRUCT)


class ReferenceIndex:
    """Maps a child identity to the identities of the types that contain it.

    Pointer, slice and map children are unwrapped to their element types;
    only alias and struct children are tracked.
    """

    def __init__(self, ignore: Optional[Callable[[str], bool]] = None) -> None:
        self._parents: Dict[str, Set[str]] = {}
        self._equivalences: List[Tuple[str, str]] = []
        self._ignore = ignore or (lambda identity: False)

    def add(self, parent: TypeNode, child: Optional[TypeNode]) -> None:
        if child is None:
            return

        if child.kind in (TypeKind.SLICE, TypeKind.POINTER):
            self.add(parent, child.underlying_type)
        elif child.kind is TypeKind.MAP:
            self.add(parent, child.key_type)
            self.add(parent, child.value_type)
        elif child.kind in _TRACKED_KINDS:
            if self._ignore(child.identity) or self._ignore(parent.identity):
                return
            self._parents.setdefault(child.identity, set()).add(parent.identity)

    def propagate(self, original: TypeNode, additional: TypeNode) -> None:
        """Every child referenced by ``original`` becomes referenced by ``additional`` too."""
        pair = (original.identity, additional.identity)
        if pair not in self._equivalences:
            self._equivalences.append(pair)
        self._apply(*pair)

    def settle(self) -> int:
        """Reapply every recorded propagation until the index stops changing.

        Makes the outcome independent of the order propagations were
        reported in. Returns the number of passes that added edges.
        """
        passes = 0
        changed = True
        while changed:
            changed = False
            for original, additional in self._equivalences:
                if self._apply(original, additional):
                    changed = True
            if changed:
                passes += 1
        return passes

    def _apply(self, original: str, additional: str) -> bool:
        if self._ignore(additional):
            return False
        changed = False
        for parents in self._parents.values():
            if original in parents and additional not in parents:
                parents.add(additional)
                changed = True
        return changed

    def parents_of(self, identity: str) -> List[str]:
        return sorted(self._parents.get(identity, ()))

    def __contains__(self, identity: object) -> bool:
        return identity in self._parents

    def __len__(self) -> int:
        return len(self._parents)

    def materialize(self, types: TypeMap, retained: Callable[[TypeNode], bool]) -> None:
        """Fill ``references`` on every tracked node, ordered by identity."""
        for child_identity in sorted(self._parents):
            child = types.get(child_identity)
            if child is None:
                raise ProcessingError(f"type not loaded: {child_identity}")
            child.references = []
            for parent_identity in self.parents_of(child_identity):
                parent = types.get(parent_identity)
                if parent is None or not retained(parent):
                    logger.debug(
                        "Dropping reference %s",
                        kv(type=child_identity, referenced_by=parent_identity),
                    )
                    continue
                child.references.append(parent)


__all__ = ["ReferenceIndex"]
