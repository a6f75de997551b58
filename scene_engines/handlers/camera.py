"""CameraHandler -- Allow-listed camera properties; matrices are never read."""

from __future__ import annotations

from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_kernel.domain.values import ObjectNode, SerializedNode
from scene_kernel.host import Camera
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.handlers.camera")


class CameraHandler(ComponentHandler):
    name = "camera"
    target = Camera
    match_mode = MatchMode.EXACT

    def serialize(self, component: Camera, context: SerializationContext) -> ObjectNode:
        properties: list[tuple[str, SerializedNode]] = []
        for binding in context.config.camera.properties:
            # Failures here are expected for some cameras and only logged.
            try:
                value = getattr(component, binding.attribute)
                if value is None:
                    continue
                properties.append((binding.key, context.structural.to_node(value)))
            except Exception as e:
                logger.debug(
                    "camera_property_skipped",
                    extra={
                        "member": binding.key,
                        "error": f"{type(e).__name__}: {e}",
                    },
                )
        return ObjectNode(tuple(self.header(component) + [
            ("properties", ObjectNode(tuple(properties))),
        ]))
