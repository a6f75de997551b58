"""
Tests for StructuralSerializer (safe value conversion).

Covers:
- Scalars, enums, and well-known value types
- Host object references with asset paths
- Math structs (stored components only) and matrices
- Containers, dataclasses and plain objects
- Loop-ignore and the depth bound
- Unconvertible values
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

import pytest

from scene_engines.structural import (
    StructuralSerializer,
    enum_to_int,
    reference_node,
    scalar_node,
)
from scene_kernel.domain import (
    NULL,
    ArrayNode,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
)
from scene_kernel.exceptions import ConversionError
from scene_kernel.host import (
    AssetDatabase,
    Bounds,
    Material,
    Matrix4x4,
    RenderingPath,
    Vector3,
)
from tests.host_fakes import DestroyedMaterial


class _Quality(Enum):
    LOW = "low"
    HIGH = "high"


@dataclass
class _Waypoint:
    label: str
    position: Vector3


class _Plain:
    def __init__(self):
        self.speed = 2.5
        self._hidden = 1
        self.callback = print


class _OfflineDatabase:
    def get_asset_path(self, obj):
        raise RuntimeError("asset database offline")


class _BadMap(Mapping):
    def __getitem__(self, key):
        raise RuntimeError("backing store gone")

    def __iter__(self):
        return iter(["k"])

    def __len__(self):
        return 1


class TestHelpers:
    def test_enum_to_int_uses_int_value(self):
        assert enum_to_int(RenderingPath.USE_PLAYER_SETTINGS) == -1

    def test_enum_to_int_falls_back_to_ordinal(self):
        assert enum_to_int(_Quality.HIGH) == 1

    def test_scalar_node_casts_subclasses(self):
        node = scalar_node(RenderingPath.FORWARD)
        assert node is None
        assert scalar_node(True) == ScalarNode(True)
        assert type(scalar_node(True).value) is bool

    def test_scalar_node_rejects_non_scalars(self):
        assert scalar_node([1]) is None

    def test_reference_node_without_database(self):
        material = Material("Stone")
        node = reference_node(material)
        assert node == ReferenceNode("Stone", material.get_instance_id())


class TestScalars:
    def setup_method(self):
        self.structural = StructuralSerializer()

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, NULL),
            (True, ScalarNode(True)),
            (3, ScalarNode(3)),
            (2.5, ScalarNode(2.5)),
            ("txt", ScalarNode("txt")),
            (RenderingPath.DEFERRED_SHADING, ScalarNode(3)),
            (_Quality.LOW, ScalarNode(0)),
            (Decimal("1.25"), ScalarNode(1.25)),
            (date(2026, 1, 2), ScalarNode("2026-01-02")),
            (datetime(2026, 1, 2, 3, 4, 5), ScalarNode("2026-01-02T03:04:05")),
            (b"\x00\x01", ScalarNode("AAE=")),
        ],
    )
    def test_scalar_conversion(self, value, expected):
        assert self.structural.to_node(value) == expected

    def test_uuid_as_string(self):
        uid = uuid.uuid4()
        assert self.structural.to_node(uid) == ScalarNode(str(uid))


class TestHostValues:
    def test_host_object_is_referenced_not_expanded(self):
        material = Material("Stone")
        node = StructuralSerializer().to_node(material)
        assert isinstance(node, ReferenceNode)
        assert node.instance_id == material.get_instance_id()
        assert node.asset_path is None

    def test_asset_path_attached_when_known(self):
        db = AssetDatabase()
        material = Material("Stone")
        db.register(material, "Assets/Stone.mat")
        node = StructuralSerializer(asset_database=db).to_node(material)
        assert node.asset_path == "Assets/Stone.mat"

    def test_vector_stored_components_only(self):
        node = StructuralSerializer().to_node(Vector3(1.0, 2.0, 3.0))
        assert node == ObjectNode((
            ("x", ScalarNode(1.0)),
            ("y", ScalarNode(2.0)),
            ("z", ScalarNode(3.0)),
        ))

    def test_bounds_nest_vectors(self):
        node = StructuralSerializer().to_node(Bounds(Vector3(), Vector3(2.0, 2.0, 2.0)))
        assert node.keys() == ("center", "size")
        assert node.get("size").get("x") == ScalarNode(2.0)

    def test_matrix_has_sixteen_entries(self):
        node = StructuralSerializer().to_node(Matrix4x4())
        assert len(node) == 16
        assert node.keys()[0] == "m00"
        assert node.keys()[-1] == "m33"
        assert node.get("m00") == ScalarNode(1.0)
        assert node.get("m01") == ScalarNode(0.0)


class TestContainers:
    def setup_method(self):
        self.structural = StructuralSerializer()

    def test_mapping_keys_stringified(self):
        node = self.structural.to_node({1: "a", "b": None})
        assert node == ObjectNode((("1", ScalarNode("a")), ("b", NULL)))

    def test_sequence_keeps_nulls_and_order(self):
        node = self.structural.to_node([1, None, "x"])
        assert node == ArrayNode((ScalarNode(1), NULL, ScalarNode("x")))

    def test_tuple_is_array(self):
        assert isinstance(self.structural.to_node((1, 2)), ArrayNode)

    def test_dataclass_fields(self):
        node = self.structural.to_node(_Waypoint("A", Vector3(1.0, 0.0, 0.0)))
        assert node.keys() == ("label", "position")

    def test_plain_object_public_data_only(self):
        node = self.structural.to_node(_Plain())
        assert node == ObjectNode((("speed", ScalarNode(2.5)),))

    def test_self_referencing_dict_is_cut(self):
        data = {"a": 1}
        data["self"] = data
        assert self.structural.to_node(data) == ObjectNode((("a", ScalarNode(1)),))

    def test_self_referencing_list_is_cut(self):
        items = [1]
        items.append(items)
        assert self.structural.to_node(items) == ArrayNode((ScalarNode(1),))

    def test_shared_non_cyclic_value_is_kept(self):
        shared = [1]
        node = self.structural.to_node({"a": shared, "b": shared})
        assert node.get("a") == node.get("b") == ArrayNode((ScalarNode(1),))


class TestFailures:
    """Values that cannot be represented raise ConversionError."""

    @pytest.mark.parametrize("value", [len, int, pytest, lambda: 1, (i for i in [])])
    def test_unconvertible(self, value):
        with pytest.raises(ConversionError):
            StructuralSerializer().to_node(value)

    def test_depth_bound(self):
        structural = StructuralSerializer(max_depth=2)
        assert structural.to_node([[1]]) == ArrayNode((ArrayNode((ScalarNode(1),)),))
        with pytest.raises(ConversionError) as exc_info:
            structural.to_node([[[1]]])
        assert "deeper than 2" in exc_info.value.reason

    def test_raising_read_becomes_conversion_error(self):
        with pytest.raises(ConversionError) as exc_info:
            StructuralSerializer().to_node(_BadMap())
        assert "backing store gone" in exc_info.value.reason

    def test_opaque_object(self):
        with pytest.raises(ConversionError):
            StructuralSerializer().to_node(object())

    def test_unreadable_top_level_reference(self):
        with pytest.raises(ConversionError) as exc_info:
            StructuralSerializer().to_node(DestroyedMaterial("Gone"))
        assert exc_info.value.value_type == "DestroyedMaterial"
        assert "destroyed" in exc_info.value.reason

    def test_failing_asset_lookup(self):
        structural = StructuralSerializer(asset_database=_OfflineDatabase())
        with pytest.raises(ConversionError) as exc_info:
            structural.to_node(Material("Skin"))
        assert "asset database offline" in exc_info.value.reason
