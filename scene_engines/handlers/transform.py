"""TransformHandler -- Fixed field set for Transform; never reflects over it."""

from __future__ import annotations

from typing import Any

from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_kernel.domain.types import full_type_name
from scene_kernel.domain.values import ObjectNode, ScalarNode, SerializedNode
from scene_kernel.exceptions import MemberAccessError
from scene_kernel.host import Transform
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.handlers.transform")

_VECTORS = (
    ("position", "position"),
    ("localPosition", "local_position"),
    ("eulerAngles", "euler_angles"),
    ("localEulerAngles", "local_euler_angles"),
    ("localScale", "local_scale"),
    ("right", "right"),
    ("up", "up"),
    ("forward", "forward"),
)


def vector3_node(vector: Any) -> ObjectNode:
    return ObjectNode((
        ("x", ScalarNode(float(vector.x))),
        ("y", ScalarNode(float(vector.y))),
        ("z", ScalarNode(float(vector.z))),
    ))


def _node_id(transform: Transform | None) -> int:
    """Instance id of the scene node owning ``transform``, 0 when absent."""
    if transform is None or transform.game_object is None:
        return 0
    return transform.game_object.get_instance_id()


class TransformHandler(ComponentHandler):
    name = "transform"
    target = Transform
    match_mode = MatchMode.EXACT

    def serialize(self, component: Transform, context: SerializationContext) -> ObjectNode:
        readers: list[tuple[str, Any]] = [
            (key, lambda attr=attr: vector3_node(getattr(component, attr)))
            for key, attr in _VECTORS
        ]
        readers += [
            ("parentInstanceID", lambda: ScalarNode(_node_id(component.parent))),
            ("rootInstanceID", lambda: ScalarNode(_node_id(component.root))),
            ("childCount", lambda: ScalarNode(component.child_count)),
            ("name", lambda: ScalarNode(component.name)),
            ("tag", lambda: ScalarNode(component.tag)),
            ("gameObjectInstanceID", lambda: ScalarNode(
                component.game_object.get_instance_id()
                if component.game_object is not None else 0
            )),
        ]

        properties: list[tuple[str, SerializedNode]] = []
        for key, read in readers:
            try:
                properties.append((key, read()))
            except Exception as e:
                error = MemberAccessError(full_type_name(type(component)), key, e)
                context.fail(logger, error.type_name, key, error)
        return ObjectNode(tuple(self.header(component) + [
            ("properties", ObjectNode(tuple(properties))),
        ]))
