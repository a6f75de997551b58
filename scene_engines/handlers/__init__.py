"""Special-case component handlers and their registry."""

from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_engines.handlers.camera import CameraHandler
from scene_engines.handlers.hostile import HostileComponentHandler
from scene_engines.handlers.registry import HandlerRegistry, default_registry
from scene_engines.handlers.transform import TransformHandler
from scene_engines.handlers.ui_document import UIDocumentHandler

__all__ = [
    "CameraHandler",
    "ComponentHandler",
    "HandlerRegistry",
    "HostileComponentHandler",
    "MatchMode",
    "SerializationContext",
    "TransformHandler",
    "UIDocumentHandler",
    "default_registry",
]
