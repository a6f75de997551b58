"""
Scene Engines - dynamic component serialization.

Turns live host components into JSON-compatible documents without ever
crashing on hostile or cyclic objects.

Engines:
- TypeClassifier: hostile vs safe, by ancestry
- MemberMetadataCache: ordered serializable members per (type, policy)
- HostileValueExtractor: strategy chain over opaque networking values
- Special-case handlers: Transform, Camera, UIDocument, hostile components
- GenericReflectiveSerializer: flat member map for everything else
- OutputNormalizer: SerializedNode tree to plain JSON data
- ComponentSerializer: the facade callers use
"""

from scene_engines.classifier import HOST_ROOTS, TypeClassifier, ancestry
from scene_engines.handlers import (
    CameraHandler,
    ComponentHandler,
    HandlerRegistry,
    HostileComponentHandler,
    MatchMode,
    SerializationContext,
    TransformHandler,
    UIDocumentHandler,
    default_registry,
)
from scene_engines.hostile_extractor import HostileValueExtractor
from scene_engines.metadata_cache import MemberMetadataCache, declared_members
from scene_engines.normalizer import OutputNormalizer
from scene_engines.reflective import GenericReflectiveSerializer
from scene_engines.scene_node import SceneNodeSerializer
from scene_engines.serializer import (
    ComponentSerializer,
    SerializationResult,
    default_serializer,
    get_component_data,
    get_scene_node_data,
    reset_default_serializer,
)
from scene_engines.structural import StructuralSerializer
from scene_engines.tracer import traced_engine

__all__ = [
    "HOST_ROOTS",
    "CameraHandler",
    "ComponentHandler",
    "ComponentSerializer",
    "GenericReflectiveSerializer",
    "HandlerRegistry",
    "HostileComponentHandler",
    "HostileValueExtractor",
    "MatchMode",
    "MemberMetadataCache",
    "OutputNormalizer",
    "SceneNodeSerializer",
    "SerializationContext",
    "SerializationResult",
    "StructuralSerializer",
    "TransformHandler",
    "TypeClassifier",
    "UIDocumentHandler",
    "ancestry",
    "declared_members",
    "default_registry",
    "default_serializer",
    "get_component_data",
    "get_scene_node_data",
    "reset_default_serializer",
    "traced_engine",
]
