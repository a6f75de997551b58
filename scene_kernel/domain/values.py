"""
Values -- The intermediate SerializedNode tree.

Responsibility:
    Handlers build a tree of these nodes; the OutputNormalizer flattens it to
    plain JSON data.  Keeping an explicit typed tree between the host objects
    and the JSON document means no handler ever emits host objects, and the
    tree holds no back references, so output cycles cannot occur.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - Nodes are frozen; ObjectNode preserves key order, ArrayNode preserves
      element order and nulls.
    - UNEXTRACTABLE is a singleton distinct from NULL.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class NullNode:
    """Explicit null."""


NULL = NullNode()


@dataclass(frozen=True, slots=True)
class ScalarNode:
    value: bool | int | float | str


@dataclass(frozen=True, slots=True)
class ReferenceNode:
    """
    Reference stub for an identity-bearing host object.

    ``include_asset_path`` forces the ``assetPath`` key even when the path is
    unknown (written as null); otherwise the key appears only for a known path.
    """

    name: str
    instance_id: int
    asset_path: str | None = None
    include_asset_path: bool = False


@dataclass(frozen=True, slots=True)
class ObjectNode:
    fields: tuple[tuple[str, SerializedNode], ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, SerializedNode]) -> ObjectNode:
        return cls(tuple(mapping.items()))

    def get(self, key: str) -> SerializedNode | None:
        for name, node in self.fields:
            if name == key:
                return node
        return None

    def keys(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self.fields)

    def __iter__(self) -> Iterator[tuple[str, SerializedNode]]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


@dataclass(frozen=True, slots=True)
class ArrayNode:
    items: tuple[SerializedNode, ...] = ()

    def __iter__(self) -> Iterator[SerializedNode]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


SerializedNode = Union[NullNode, ScalarNode, ReferenceNode, ObjectNode, ArrayNode]


class _Unextractable:
    """No extraction strategy produced a value."""

    _instance: _Unextractable | None = None

    def __new__(cls) -> _Unextractable:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNEXTRACTABLE"


UNEXTRACTABLE = _Unextractable()
