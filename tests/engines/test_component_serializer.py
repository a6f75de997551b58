"""
Tests for the ComponentSerializer facade.

Covers:
- Strategy selection order (registry, hostile, reflective)
- Degradation to the minimal document on unexpected handler failure
- None handling
- Idempotence and cache stability
- Log context binding and engine traces
- The process-wide module-level functions
"""

import json

import pytest

from scene_engines import serializer as serializer_module
from scene_engines.handlers.base import ComponentHandler, MatchMode
from scene_engines.handlers.registry import HandlerRegistry
from scene_engines.serializer import (
    ComponentSerializer,
    SerializationResult,
    get_component_data,
    get_scene_node_data,
    reset_default_serializer,
)
from scene_kernel.domain import AccessPolicy, ObjectNode, full_type_name
from scene_kernel.host import Camera, MonoBehaviour, SceneNode, UIDocument
from scene_kernel.logging_config import LogContext
from tests.host_fakes import Inventory, NetworkObject, PlayerController


class _Widget(MonoBehaviour):
    size: int = 1


class _ExplodingHandler(ComponentHandler):
    name = "exploding"
    target = _Widget
    match_mode = MatchMode.EXACT

    def serialize(self, component, context):
        raise RuntimeError("handler bug")


class _ContextProbe(ComponentHandler):
    """Captures the log context seen while serializing."""

    name = "probe"
    target = _Widget
    match_mode = MatchMode.EXACT

    def __init__(self):
        self.seen = None

    def serialize(self, component, context):
        self.seen = LogContext.get_all()
        return ObjectNode(tuple(self.header(component)))


@pytest.fixture(autouse=True)
def _reset_default():
    reset_default_serializer()
    yield
    reset_default_serializer()


class TestStrategySelection:
    def test_registered_handler_first(self, serializer):
        assert serializer.select_handler(Camera).name == "camera"
        assert serializer.select_handler(UIDocument).name == "ui_document"

    def test_hostile_before_reflection(self, serializer):
        assert serializer.select_handler(PlayerController).name == "hostile"

    def test_reflection_last(self, serializer):
        assert serializer.select_handler(Inventory).name == "reflective"

    def test_result_records_strategy(self, serializer):
        result = serializer.serialize(SceneNode("Bag").add_component(Inventory))
        assert isinstance(result, SerializationResult)
        assert result.strategy == "reflective"
        assert result.type_name == "tests.host_fakes.Inventory"


class TestDegradation:
    """An unexpected handler failure still yields a document."""

    def setup_method(self):
        registry = HandlerRegistry()
        registry.register(_ExplodingHandler())
        self.serializer = ComponentSerializer(registry=registry)

    def test_minimal_document(self):
        widget = SceneNode("W").add_component(_Widget)
        result = self.serializer.serialize(widget)
        assert result.degraded
        assert result.document == {
            "typeName": full_type_name(_Widget),
            "instanceID": widget.get_instance_id(),
        }

    def test_failure_logged(self, captured_logs):
        widget = SceneNode("W").add_component(_Widget)
        self.serializer.serialize(widget)
        failures = [r for r in captured_logs() if r["message"] == "handler_failed"]
        assert failures[0]["handler"] == "exploding"
        assert failures[0]["exc_message"] == "handler bug"
        assert failures[0]["instance_id"] == str(widget.get_instance_id())

    def test_other_types_unaffected(self):
        data = self.serializer.get_component_data(SceneNode("C").add_component(Camera))
        assert "properties" in data


class TestNoneInput:
    def test_none_component(self, serializer):
        assert serializer.serialize(None) is None
        assert serializer.get_component_data(None) is None

    def test_none_scene_node(self, serializer):
        assert serializer.get_scene_node_data(None) is None


class TestInvariants:
    def setup_method(self):
        self.node = SceneNode("Player")
        self.player = self.node.add_component(PlayerController)
        self.player.target = NetworkObject("Ship")

    def test_idempotent_output(self, serializer):
        first = json.dumps(serializer.get_component_data(self.player))
        second = json.dumps(serializer.get_component_data(self.player))
        assert first == second

    def test_cache_entry_stable(self, serializer):
        inventory = SceneNode("Bag").add_component(Inventory)
        serializer.get_component_data(inventory)
        entry = serializer.cache.members_for(Inventory, AccessPolicy.INCLUDE_SERIALIZED)
        serializer.get_component_data(inventory)
        assert serializer.cache.members_for(
            Inventory, AccessPolicy.INCLUDE_SERIALIZED
        ) is entry

    def test_output_is_json_encodable(self, serializer):
        for component in self.node.get_components():
            json.dumps(serializer.get_component_data(component), allow_nan=False)


class TestLogging:
    def test_context_bound_during_call(self):
        probe = _ContextProbe()
        registry = HandlerRegistry()
        registry.register(probe)
        serializer = ComponentSerializer(registry=registry)
        widget = SceneNode("W").add_component(_Widget)

        serializer.serialize(widget, AccessPolicy.PUBLIC_ONLY)

        assert probe.seen["instance_id"] == str(widget.get_instance_id())
        assert probe.seen["policy"] == "public_only"
        assert probe.seen["component_type"].endswith("._Widget")

    def test_context_restored_after_call(self, serializer):
        LogContext.set(request_id="req-1")
        serializer.get_component_data(SceneNode("C").add_component(Camera))
        assert LogContext.get_all() == {"request_id": "req-1"}

    def test_engine_trace_emitted(self, serializer, captured_logs):
        serializer.get_component_data(SceneNode("C").add_component(Camera))
        traces = [r for r in captured_logs() if r["message"] == "SCENE_ENGINE_TRACE"]
        engines = {t["engine_name"] for t in traces}
        assert {"component_serializer", "normalizer"} <= engines
        facade = next(t for t in traces if t["engine_name"] == "component_serializer")
        assert len(facade["input_fingerprint"]) == 16


class TestModuleLevelFunctions:
    def test_default_serializer_is_shared(self):
        first = serializer_module.default_serializer()
        assert serializer_module.default_serializer() is first

    def test_get_component_data(self):
        camera = SceneNode("C").add_component(Camera)
        data = get_component_data(camera)
        assert data["typeName"] == "scene_kernel.host.Camera"

    def test_policy_flag(self):
        player = SceneNode("P").add_component(PlayerController)
        assert "_tuned" in get_component_data(player)["properties"]
        assert "_tuned" not in get_component_data(player, False)["properties"]

    def test_get_scene_node_data(self):
        node = SceneNode("Root")
        data = get_scene_node_data(node, include_components=True)
        assert data["name"] == "Root"
        assert data["components"][0]["typeName"] == "scene_kernel.host.Transform"

    def test_reset_builds_new_default(self):
        first = serializer_module.default_serializer()
        reset_default_serializer()
        assert serializer_module.default_serializer() is not first
