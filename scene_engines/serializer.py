"""
ComponentSerializer -- Public facade over the serialization engines.

Responsibility:
    Pick a strategy for a component (registered special-case handler, then
    the hostile handler, then generic reflection), run it against a fresh
    DiagnosticSink, and normalize the resulting node tree into plain JSON
    data.  Also serializes whole scene nodes.

Architecture position:
    Engines -- the only module callers need.  Wires configuration, the
    metadata cache, the classifier, the extractor and the handlers.

Invariants enforced:
    - Never raises for a non-null component: an unexpected handler failure
      degrades to the minimal ``{typeName, instanceID}`` document.
    - ``None`` in gives ``None`` out.
    - Log records emitted during a call carry component_type, instance_id
      and policy through LogContext.

Failure modes:
    - ConfigurationError / yaml.YAMLError / FileNotFoundError only while
      loading configuration at construction.

Usage:
    from scene_engines import get_component_data

    data = get_component_data(component)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from scene_config import get_active_config
from scene_config.schema import SerializerConfig
from scene_engines.classifier import TypeClassifier
from scene_engines.handlers.base import ComponentHandler, SerializationContext
from scene_engines.handlers.hostile import HostileComponentHandler
from scene_engines.handlers.registry import HandlerRegistry, default_registry
from scene_engines.hostile_extractor import HostileValueExtractor
from scene_engines.metadata_cache import MemberMetadataCache
from scene_engines.normalizer import OutputNormalizer
from scene_engines.reflective import GenericReflectiveSerializer
from scene_engines.scene_node import SceneNodeSerializer
from scene_engines.structural import AssetPathResolver, StructuralSerializer
from scene_engines.tracer import traced_engine
from scene_kernel.domain.diagnostics import DiagnosticSink, SerializationDiagnostic
from scene_kernel.domain.types import AccessPolicy, full_type_name
from scene_kernel.domain.values import ObjectNode, ScalarNode
from scene_kernel.host import SceneNode
from scene_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.serializer")


@dataclass(frozen=True)
class SerializationResult:
    """Outcome of serializing one component."""

    type_name: str
    strategy: str
    node: ObjectNode
    document: dict[str, Any]
    diagnostics: tuple[SerializationDiagnostic, ...] = ()

    @property
    def degraded(self) -> bool:
        return self.strategy == "minimal"


def _instance_id(obj: Any) -> int:
    try:
        return int(obj.get_instance_id())
    except Exception:
        logger.debug("instance_id_unreadable", extra={"value_type": type(obj).__qualname__})
        return 0


class ComponentSerializer:
    """Dispatches components to handlers and normalizes their output."""

    def __init__(
        self,
        config: SerializerConfig | None = None,
        *,
        registry: HandlerRegistry | None = None,
        cache: MemberMetadataCache | None = None,
        classifier: TypeClassifier | None = None,
        asset_database: AssetPathResolver | None = None,
        is_playing: bool = False,
    ) -> None:
        self._config = config if config is not None else get_active_config()
        self._registry = registry if registry is not None else default_registry()
        self._cache = cache if cache is not None else MemberMetadataCache(self._config.members)
        self._classifier = (
            classifier if classifier is not None
            else TypeClassifier(self._config.classifier)
        )
        self._extractor = HostileValueExtractor(self._classifier, self._config.extractor)
        self._structural = StructuralSerializer(
            max_depth=self._config.structural.max_depth,
            asset_database=asset_database,
        )
        self._assets = asset_database
        self._hostile = HostileComponentHandler(self._classifier)
        self._reflective = GenericReflectiveSerializer()
        self._normalizer = OutputNormalizer()
        self._scene_nodes = SceneNodeSerializer()
        self.is_playing = is_playing

    @property
    def config(self) -> SerializerConfig:
        return self._config

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def cache(self) -> MemberMetadataCache:
        return self._cache

    @property
    def classifier(self) -> TypeClassifier:
        return self._classifier

    @property
    def extractor(self) -> HostileValueExtractor:
        return self._extractor

    @property
    def normalizer(self) -> OutputNormalizer:
        return self._normalizer

    def select_handler(self, cls: type) -> ComponentHandler:
        """Registered handler first, then hostile, then generic reflection."""
        handler = self._registry.resolve(cls)
        if handler is not None:
            return handler
        if self._hostile.matches(cls):
            return self._hostile
        return self._reflective

    def _context(self, policy: AccessPolicy, sink: DiagnosticSink) -> SerializationContext:
        return SerializationContext(
            policy=policy,
            sink=sink,
            cache=self._cache,
            classifier=self._classifier,
            extractor=self._extractor,
            structural=self._structural,
            config=self._config,
            asset_database=self._assets,
            is_playing=self.is_playing,
        )

    @traced_engine(
        "component_serializer", "1.0", fingerprint_fields=("component", "policy")
    )
    def serialize(
        self,
        component: Any,
        policy: AccessPolicy = AccessPolicy.INCLUDE_SERIALIZED,
    ) -> SerializationResult | None:
        if component is None:
            return None

        cls = type(component)
        type_name = full_type_name(cls)
        instance_id = _instance_id(component)
        sink = DiagnosticSink()
        handler = self.select_handler(cls)
        strategy = handler.name

        with LogContext.bind(
            component_type=type_name,
            instance_id=str(instance_id),
            policy=policy.value,
        ):
            try:
                node = handler.serialize(component, self._context(policy, sink))
            except Exception:
                logger.exception("handler_failed", extra={"handler": handler.name})
                strategy = "minimal"
                node = ObjectNode((
                    ("typeName", ScalarNode(type_name)),
                    ("instanceID", ScalarNode(instance_id)),
                ))

            document = self._normalizer.normalize(node, sink, type_name=type_name)
            logger.debug(
                "component_serialized",
                extra={"strategy": strategy, "diagnostic_count": len(sink)},
            )

        return SerializationResult(
            type_name=type_name,
            strategy=strategy,
            node=node,
            document=document,
            diagnostics=sink.diagnostics,
        )

    def get_component_data(
        self,
        component: Any,
        include_non_public_serialized_fields: bool = True,
    ) -> dict[str, Any] | None:
        result = self.serialize(
            component, AccessPolicy.from_flag(include_non_public_serialized_fields)
        )
        return result.document if result is not None else None

    @traced_engine("scene_node_serializer", "1.0", fingerprint_fields=("node",))
    def get_scene_node_data(
        self,
        node: SceneNode | None,
        include_components: bool = False,
    ) -> dict[str, Any] | None:
        if node is None:
            return None
        try:
            document = self._normalizer.normalize(self._scene_nodes.serialize(node))
        except Exception:
            logger.exception("scene_node_failed")
            document = {"name": node.name, "instanceID": _instance_id(node)}
        if include_components:
            document["components"] = [
                self.get_component_data(component)
                for component in node.get_components()
            ]
        return document


# ---------------------------------------------------------------------------
# Process-wide default
# ---------------------------------------------------------------------------

_default_serializer: ComponentSerializer | None = None
_default_lock = threading.Lock()


def default_serializer() -> ComponentSerializer:
    """Lazily built serializer over the packaged default configuration."""
    global _default_serializer
    with _default_lock:
        if _default_serializer is None:
            _default_serializer = ComponentSerializer()
        return _default_serializer


def reset_default_serializer() -> None:
    """Drop the process-wide serializer. FOR TESTING ONLY."""
    global _default_serializer
    with _default_lock:
        _default_serializer = None


def get_component_data(
    component: Any,
    include_non_public_serialized_fields: bool = True,
) -> dict[str, Any] | None:
    return default_serializer().get_component_data(
        component, include_non_public_serialized_fields
    )


def get_scene_node_data(
    node: SceneNode | None,
    include_components: bool = False,
) -> dict[str, Any] | None:
    return default_serializer().get_scene_node_data(node, include_components)
