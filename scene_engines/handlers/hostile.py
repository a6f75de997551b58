"""
HostileComponentHandler -- Safe rendering of networking components.

Networking behaviours throw, crash or return garbage when their properties
are read outside a live simulation.  This handler reads only identity
members and the fields declared directly on the concrete (user) type; it
never enumerates properties and never walks into inherited library fields.
"""

from __future__ import annotations

from typing import Any

from scene_engines.classifier import TypeClassifier
from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_engines.metadata_cache import (
    declared_fields,
    is_field_included,
    is_serialize_marked,
    unwrap_annotation,
)
from scene_kernel.domain.types import Classification, full_type_name
from scene_kernel.domain.values import (
    NULL,
    UNEXTRACTABLE,
    ObjectNode,
    ScalarNode,
    SerializedNode,
)
from scene_kernel.exceptions import (
    ConversionError,
    ExtractionError,
    MemberAccessError,
)
from scene_kernel.host import Behaviour, Component
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.handlers.hostile")


class HostileComponentHandler(ComponentHandler):
    name = "hostile"
    target = Component
    match_mode = MatchMode.DERIVED

    def __init__(self, classifier: TypeClassifier) -> None:
        self._classifier = classifier

    def matches(self, cls: type) -> bool:
        return self._classifier.is_hostile(cls)

    def _identity(
        self, component: Any, context: SerializationContext, type_name: str
    ) -> list[tuple[str, SerializedNode]]:
        readers: list[tuple[str, Any]] = [
            ("name", lambda: component.name),
            ("instanceID", component.get_instance_id),
        ]
        if isinstance(component, Behaviour):
            readers.append(("enabled", lambda: bool(component.enabled)))
        readers.append((
            "gameObjectInstanceID",
            lambda: component.game_object.get_instance_id()
            if component.game_object is not None else 0,
        ))

        identity: list[tuple[str, SerializedNode]] = []
        for key, read in readers:
            try:
                identity.append((key, ScalarNode(read())))
            except Exception as e:
                context.fail(logger, type_name, key, MemberAccessError(type_name, key, e))
        return identity

    def _field(
        self,
        component: Any,
        name: str,
        declared_type: Any,
        context: SerializationContext,
        type_name: str,
    ) -> SerializedNode | None:
        if context.classifier.classify_annotation(declared_type) is Classification.HOSTILE:
            try:
                value = context.read(component, name)
            except MemberAccessError as e:
                context.fail(logger, type_name, name, e)
                return None
            if value is None:
                return NULL
            return self._extract(value, declared_type, context, type_name, name)

        try:
            value = context.read(component, name)
        except MemberAccessError as e:
            context.fail(logger, type_name, name, e)
            return ScalarNode(f"<error: {e.reason}>")

        if value is not None and context.classifier.is_hostile(type(value)):
            return self._extract(value, declared_type, context, type_name, name)

        try:
            return context.structural.to_node(value)
        except ConversionError as e:
            context.fail(logger, type_name, name, e)
            return ScalarNode(f"<serialization error: {e.reason}>")

    def _extract(
        self,
        value: Any,
        declared_type: Any,
        context: SerializationContext,
        type_name: str,
        name: str,
    ) -> SerializedNode | None:
        node = context.extractor.extract(value, declared_type=declared_type)
        if node is UNEXTRACTABLE:
            error = ExtractionError(type_name, name, full_type_name(type(value)))
            context.fail(logger, type_name, name, error)
            return None
        return node

    def serialize(self, component: Any, context: SerializationContext) -> ObjectNode:
        cls = type(component)
        type_name = full_type_name(cls)
        properties = self._identity(component, context, type_name)
        taken = {key for key, _ in properties}

        for name, annotation in declared_fields(cls):
            if name in taken:
                continue
            is_public = not name.startswith("_")
            if not is_field_included(
                is_public, is_serialize_marked(annotation), context.policy
            ):
                continue
            node = self._field(
                component, name, unwrap_annotation(annotation), context, type_name
            )
            if node is not None:
                properties.append((name, node))

        instance_id = dict(properties).get("instanceID", ScalarNode(0))
        return ObjectNode((
            ("typeName", ScalarNode(type_name)),
            ("instanceID", instance_id),
            ("isFusionComponent", ScalarNode(True)),
            ("properties", ObjectNode(tuple(properties))),
        ))
