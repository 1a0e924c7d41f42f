"""Per-run resolver state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set

from ..config import DEFAULT_FIELD_NAME_TAG, DEFAULT_MAX_DEPTH, ProcessorConfig
from ..models import TypeMap, TypeNode
from .filters import ExclusionPolicy
from .references import ReferenceIndex


@dataclass
class ResolverContext:
    """Canonical type table, reference index and policy for one run.

    Constructed at the start of a run and discarded once the groups have been
    assembled; nothing here is shared between runs.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    policy: ExclusionPolicy = field(default_factory=ExclusionPolicy)
    use_raw_docstring: bool = False
    field_name_tag: str = DEFAULT_FIELD_NAME_TAG
    types: TypeMap = field(default_factory=TypeMap)
    references: ReferenceIndex = field(init=False)
    truncated: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.references = ReferenceIndex(ignore=self.policy.should_ignore_type)

    @classmethod
    def from_config(cls, config: ProcessorConfig) -> "ResolverContext":
        return cls(
            max_depth=config.max_depth,
            policy=ExclusionPolicy.from_config(config),
            use_raw_docstring=config.use_raw_docstring,
            field_name_tag=config.field_name_tag,
        )

    def lookup(self, identity: str) -> Optional[TypeNode]:
        return self.types.get(identity)

    def register(self, node: TypeNode) -> TypeNode:
        self.types[node.identity] = node
        return node

    def mark_truncated(self, identity: str) -> None:
        self.truncated.add(identity)

    def clear_truncated(self, identity: str) -> None:
        self.truncated.discard(identity)

    def is_truncated(self, identity: str) -> bool:
        return identity in self.truncated

    def add_reference(self, parent: TypeNode, child: Optional[TypeNode]) -> None:
        self.references.add(parent, child)

    def propagate_reference(self, original: TypeNode, additional: TypeNode) -> None:
        self.references.propagate(original, additional)


__all__ = ["ResolverContext"]
