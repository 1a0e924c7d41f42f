"""Struct member extraction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from ..logging import get_logger, kv
from ..models import Field, TypeNode
from ..provider import MemberDescriptor, Package

if TYPE_CHECKING:
    from .resolver import TypeResolver

logger = get_logger("processor.fields")


class FieldExtractor:
    """Appends the documented fields of a struct, in declaration order."""

    def __init__(self, resolver: "TypeResolver") -> None:
        self.resolver = resolver

    def extract(
        self,
        struct_node: TypeNode,
        package: Package,
        members: Iterable[MemberDescriptor],
        depth: int,
    ) -> None:
        context = self.resolver.context
        logger.debug("Processing struct fields %s", kv(package=package.path, type=struct_node.identity))

        for member in members:
            if member.type is None:
                logger.debug("Failed to determine type of field %s", kv(field=member.name))
                continue

            field = Field(name=member.name, doc=member.doc, embedded=member.name == "")
            serialized = self._serialized_name(member)
            if serialized:
                field.name = serialized

            logger.debug("Loading field type %s", kv(type=struct_node.identity, field=field.name))
            # Membership is not indirection: same depth as the struct.
            field.type = self.resolver.resolve(package, None, member.type, depth)
            if field.type is None:
                logger.debug(
                    "Failed to load type for field %s",
                    kv(field=member.name, type=str(member.type)),
                )
                continue

            # Fields are rendered in the context of their declaring struct.
            field.type.imported = False

            if field.embedded:
                field.inlined = field.name == ""
                if field.inlined:
                    field.name = field.type.name

            if context.policy.should_ignore_field(struct_node.identity, field.name):
                logger.debug(
                    "Skipping excluded field %s",
                    kv(type=struct_node.identity, field=field.name),
                )
                continue

            struct_node.fields.append(field)
            context.add_reference(struct_node, field.type)

    def _serialized_name(self, member: MemberDescriptor) -> Optional[str]:
        tag_value = self.resolver.provider.field_tag_value(
            member, self.resolver.context.field_name_tag
        )
        if tag_value is None:
            return None
        return tag_value.split(",")[0] or None


__all__ = ["FieldExtractor"]
