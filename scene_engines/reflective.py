"""
GenericReflectiveSerializer -- Flat member map for ordinary components.

Responsibility:
    Serialize any component no special-case handler claims and the
    classifier considers safe, as ``{typeName, instanceID, properties?}``.
    Members come from the metadata cache; each one is read and converted in
    isolation so one failing member never costs its siblings.

Architecture position:
    Engines -- pure apart from reading the component's members.

Invariants enforced:
    - ``properties`` is present only when at least one member survived.
    - Outside play mode, members that would instantiate per-object copies
      (``material``, ``materials``, ``mesh``) read their shared counterparts.
    - Hostile values (by declared or runtime type) and containers holding
      them go through the extractor; they are never reflected over.

Failure modes:
    - Access, extraction and conversion failures omit the member and
      record a diagnostic.  Conversion failures are also logged at warning.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping, Set
from typing import Any

from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_kernel.domain.types import Classification, MemberDescriptor, full_type_name
from scene_kernel.domain.values import (
    NULL,
    UNEXTRACTABLE,
    ObjectNode,
    SerializedNode,
)
from scene_kernel.exceptions import ConversionError, ExtractionError, MemberAccessError
from scene_kernel.host import HostObject
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.reflective")


def _holds_hostile_elements(value: Any, context: SerializationContext) -> bool:
    if isinstance(value, Mapping):
        items = itertools.chain(value.keys(), value.values())
    elif isinstance(value, (list, tuple, Set)):
        items = value
    else:
        return False
    return any(
        item is not None and context.classifier.is_hostile(type(item))
        for item in items
    )


def serialize_member_value(
    value: Any,
    declared_type: Any,
    context: SerializationContext,
    *,
    type_name: str,
    member: str,
) -> SerializedNode | None:
    """Convert one member value; None means the member is omitted."""
    if value is None:
        return NULL

    declared_hostile = (
        context.classifier.classify_annotation(declared_type) is Classification.HOSTILE
    )
    if (
        declared_hostile
        or context.classifier.is_hostile(type(value))
        or _holds_hostile_elements(value, context)
    ):
        node = context.extractor.extract(value, declared_type=declared_type)
        if node is UNEXTRACTABLE:
            error = ExtractionError(type_name, member, full_type_name(type(value)))
            context.fail(logger, type_name, member, error)
            return None
        return node

    try:
        return context.structural.to_node(value)
    except ConversionError as e:
        context.fail(logger, type_name, member, e)
        return None


class GenericReflectiveSerializer(ComponentHandler):
    name = "reflective"
    target = HostObject
    match_mode = MatchMode.DERIVED

    def _attribute_for(
        self, component: Any, member: MemberDescriptor, context: SerializationContext
    ) -> str:
        if context.is_playing:
            return member.name
        shared = context.config.members.substitution_for(member.name)
        if shared is not None and hasattr(type(component), shared):
            return shared
        return member.name

    def serialize(self, component: Any, context: SerializationContext) -> ObjectNode:
        type_name = full_type_name(type(component))
        entry = context.cache.members_for(type(component), context.policy)

        properties: list[tuple[str, SerializedNode]] = []
        for member in entry:
            try:
                value = context.read(component, self._attribute_for(component, member, context))
            except MemberAccessError as e:
                context.fail(logger, type_name, member.name, e)
                continue
            node = serialize_member_value(
                value,
                member.declared_type,
                context,
                type_name=type_name,
                member=member.name,
            )
            if node is not None:
                properties.append((member.name, node))

        fields = self.header(component)
        if properties:
            fields.append(("properties", ObjectNode(tuple(properties))))
        return ObjectNode(tuple(fields))
