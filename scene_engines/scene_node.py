"""SceneNodeSerializer -- Summary document for a whole scene node."""

from __future__ import annotations

from scene_engines.handlers.transform import vector3_node
from scene_kernel.domain.types import full_type_name
from scene_kernel.domain.values import ArrayNode, ObjectNode, ScalarNode
from scene_kernel.host import SceneNode

_TRANSFORM_VECTORS = (
    ("position", "position"),
    ("localPosition", "local_position"),
    ("rotation", "euler_angles"),
    ("localRotation", "local_euler_angles"),
    ("scale", "local_scale"),
    ("forward", "forward"),
    ("up", "up"),
    ("right", "right"),
)


class SceneNodeSerializer:
    """Identity, flags, transform summary and component type names of a node."""

    def serialize(self, node: SceneNode) -> ObjectNode:
        transform = node.transform
        parent = transform.parent
        parent_node = parent.game_object if parent is not None else None

        transform_summary = ObjectNode(tuple(
            (key, vector3_node(getattr(transform, attribute)))
            for key, attribute in _TRANSFORM_VECTORS
        ))
        component_names = ArrayNode(tuple(
            ScalarNode(full_type_name(type(component)))
            for component in node.get_components()
        ))
        return ObjectNode((
            ("name", ScalarNode(node.name)),
            ("instanceID", ScalarNode(node.get_instance_id())),
            ("tag", ScalarNode(node.tag)),
            ("layer", ScalarNode(node.layer)),
            ("activeSelf", ScalarNode(node.active_self)),
            ("activeInHierarchy", ScalarNode(node.active_in_hierarchy)),
            ("isStatic", ScalarNode(node.is_static)),
            ("scenePath", ScalarNode(node.scene_path)),
            ("transform", transform_summary),
            (
                "parentInstanceID",
                ScalarNode(
                    parent_node.get_instance_id() if parent_node is not None else 0
                ),
            ),
            ("componentNames", component_names),
        ))
