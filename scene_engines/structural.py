"""
StructuralSerializer -- Ordinary value-to-node conversion for safe values.

Responsibility:
    Convert any value the classifier considers safe into a SerializedNode:
    scalars, enums (as integers), host object references, the host's
    fixed-layout math structs, mappings, sequences, dataclasses and plain
    objects.

Architecture position:
    Engines -- pure; the only outside reads are attribute accesses on the
    value being converted and asset-path lookups.

Invariants enforced:
    - Host objects are never expanded, only referenced.
    - Math structs serialize their stored components only, never derived
      properties (``normalized`` on a vector would otherwise recurse forever).
    - A container already on the current path is skipped (loop-ignore).

Failure modes:
    - ConversionError for types, modules, callables and generators, for
      nesting deeper than ``max_depth``, and for any attribute read that
      raises while expanding a nested object.
"""

from __future__ import annotations

import base64
import dataclasses
import inspect
import types
import uuid
from collections.abc import Iterator, Mapping, Set
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

from scene_kernel.domain.values import (
    NULL,
    ArrayNode,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
    SerializedNode,
)
from scene_kernel.exceptions import ConversionError
from scene_kernel.host import (
    Bounds,
    Color,
    HostObject,
    Matrix4x4,
    Quaternion,
    Rect,
    Vector2,
    Vector3,
    Vector4,
)


class AssetPathResolver(Protocol):
    def get_asset_path(self, obj: HostObject) -> str: ...


_STRUCT_KEYS: dict[type, tuple[str, ...]] = {
    Vector2: ("x", "y"),
    Vector3: ("x", "y", "z"),
    Vector4: ("x", "y", "z", "w"),
    Quaternion: ("x", "y", "z", "w"),
    Color: ("r", "g", "b", "a"),
    Rect: ("x", "y", "width", "height"),
    Bounds: ("center", "size"),
}

_MATRIX_KEYS = tuple((f"m{r}{c}", r, c) for r in range(4) for c in range(4))

_UNCONVERTIBLE = (
    type,
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
)

# Marker returned for a container that is already on the current path.
_LOOP = object()


def enum_to_int(value: Enum) -> int:
    """Integer form of an enum member: its value, or its ordinal."""
    raw = value.value
    if isinstance(raw, int) and not isinstance(raw, bool):
        return int(raw)
    return list(type(value)).index(value)


def scalar_node(value: Any) -> ScalarNode | None:
    """ScalarNode for bool/int/float/str (subclasses cast down), else None."""
    if isinstance(value, Enum):
        return None
    if isinstance(value, bool):
        return ScalarNode(bool(value))
    if isinstance(value, int):
        return ScalarNode(int(value))
    if isinstance(value, float):
        return ScalarNode(float(value))
    if isinstance(value, str):
        return ScalarNode(str(value))
    return None


def reference_node(
    obj: HostObject,
    asset_database: AssetPathResolver | None = None,
    *,
    include_asset_path: bool = False,
) -> ReferenceNode:
    path = asset_database.get_asset_path(obj) if asset_database is not None else ""
    return ReferenceNode(
        name=obj.name,
        instance_id=obj.get_instance_id(),
        asset_path=path or None,
        include_asset_path=include_asset_path,
    )


class StructuralSerializer:
    """Converts safe values; raises ConversionError when it cannot."""

    def __init__(
        self,
        *,
        max_depth: int = 8,
        asset_database: AssetPathResolver | None = None,
    ) -> None:
        self._max_depth = max_depth
        self._assets = asset_database

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def to_node(self, value: Any) -> SerializedNode:
        try:
            node = self._convert(value, 0, frozenset())
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(type(value).__name__, f"{type(e).__name__}: {e}") from e
        if node is _LOOP:
            return NULL
        return node

    def _convert(self, value: Any, depth: int, path: frozenset[int]) -> Any:
        if depth > self._max_depth:
            raise ConversionError(
                type(value).__name__, f"nesting deeper than {self._max_depth}"
            )
        if value is None:
            return NULL
        if isinstance(value, Enum):
            return ScalarNode(enum_to_int(value))
        scalar = scalar_node(value)
        if scalar is not None:
            return scalar
        if isinstance(value, Decimal):
            return ScalarNode(float(value))
        if isinstance(value, uuid.UUID):
            return ScalarNode(str(value))
        if isinstance(value, (datetime, date, time)):
            return ScalarNode(value.isoformat())
        if isinstance(value, (bytes, bytearray)):
            return ScalarNode(base64.b64encode(bytes(value)).decode("ascii"))
        if isinstance(value, HostObject):
            return reference_node(value, self._assets)
        if isinstance(value, _UNCONVERTIBLE) or inspect.isroutine(value):
            raise ConversionError(
                type(value).__name__, "callables, types and modules are not data"
            )
        if isinstance(value, Matrix4x4):
            return ObjectNode(tuple(
                (key, ScalarNode(float(value[r, c]))) for key, r, c in _MATRIX_KEYS
            ))
        keys = _STRUCT_KEYS.get(type(value))
        if keys is not None:
            return self._object(
                ((k, getattr(value, k)) for k in keys), value, depth, path
            )

        if id(value) in path:
            return _LOOP
        inner = path | {id(value)}

        if isinstance(value, Mapping):
            return self._object(
                ((str(k), v) for k, v in value.items()), value, depth, inner
            )
        if isinstance(value, (list, tuple, Set)):
            items = []
            for item in value:
                node = self._convert(item, depth + 1, inner)
                if node is not _LOOP:
                    items.append(node)
            return ArrayNode(tuple(items))
        if dataclasses.is_dataclass(value):
            return self._object(
                ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value)),
                value, depth, inner,
            )
        return self._object(self._public_attributes(value), value, depth, inner)

    def _object(
        self, pairs: Any, owner: Any, depth: int, path: frozenset[int]
    ) -> ObjectNode:
        fields: list[tuple[str, SerializedNode]] = []
        try:
            for key, member in pairs:
                node = self._convert(member, depth + 1, path)
                if node is not _LOOP:
                    fields.append((key, node))
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(type(owner).__name__, f"{type(e).__name__}: {e}") from e
        return ObjectNode(tuple(fields))

    @staticmethod
    def _public_attributes(value: Any) -> Iterator[tuple[str, Any]]:
        names: list[str] = []
        instance_dict = getattr(value, "__dict__", None)
        if isinstance(instance_dict, dict):
            names.extend(instance_dict)
        for klass in type(value).__mro__:
            slots = klass.__dict__.get("__slots__", ())
            names.extend((slots,) if isinstance(slots, str) else slots)
        if instance_dict is None and not names:
            raise ConversionError(type(value).__name__, "opaque object")
        for name in dict.fromkeys(names):
            if name.startswith("_") or not hasattr(value, name):
                continue
            member = getattr(value, name)
            if not callable(member):
                yield name, member
