"""
Types -- Classification, access policy and member metadata value objects.

Responsibility:
    Defines the small immutable vocabulary shared by the classifier, the
    metadata cache and the handlers: Classification, AccessPolicy,
    MemberKind, MemberDescriptor, TypeDescriptor and CacheEntry.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - A CacheEntry is immutable once built (tuple of frozen descriptors).
    - AccessPolicy is hashable so (type, policy) can key the cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Classification(str, Enum):
    """Outcome of walking a type's ancestry."""

    SAFE = "safe"
    HOSTILE = "hostile"


class AccessPolicy(str, Enum):
    """
    Which members a caller wants.

    PUBLIC_ONLY:        public fields and properties only.
    INCLUDE_SERIALIZED: additionally non-public fields that carry the
                        SerializeField marker.
    """

    PUBLIC_ONLY = "public_only"
    INCLUDE_SERIALIZED = "include_serialized"

    @classmethod
    def from_flag(cls, include_non_public_serialized_fields: bool) -> AccessPolicy:
        if include_non_public_serialized_fields:
            return cls.INCLUDE_SERIALIZED
        return cls.PUBLIC_ONLY

    @property
    def include_non_public_serialized_fields(self) -> bool:
        return self is AccessPolicy.INCLUDE_SERIALIZED


class MemberKind(str, Enum):
    FIELD = "field"
    PROPERTY = "property"


def full_type_name(cls: type) -> str:
    """``module.qualname`` of a class; the ``typeName`` written to output."""
    module = cls.__module__
    if module in ("builtins", "__main__") or not module:
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """One serializable member discovered on a type."""

    name: str
    kind: MemberKind
    declared_on: type
    declared_type: object = None
    is_public: bool = True
    is_serialize_marked: bool = False

    @property
    def is_property(self) -> bool:
        return self.kind is MemberKind.PROPERTY


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """
    A type together with its ancestry chain (leaf first).

    The chain is already cut at the host roots, so it holds exactly the
    levels the classifier and the member walk look at.
    """

    type: type
    ancestry: tuple[type, ...] = field(default=())

    @property
    def full_name(self) -> str:
        return full_type_name(self.type)

    @property
    def namespace(self) -> str:
        return self.type.__module__ or ""

    @property
    def name(self) -> str:
        return self.type.__name__


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Ordered members for one (type, policy): properties first, then fields."""

    type: type
    policy: AccessPolicy
    members: tuple[MemberDescriptor, ...] = ()

    def __iter__(self):
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.members)

    def properties(self) -> tuple[MemberDescriptor, ...]:
        return tuple(m for m in self.members if m.kind is MemberKind.PROPERTY)

    def fields(self) -> tuple[MemberDescriptor, ...]:
        return tuple(m for m in self.members if m.kind is MemberKind.FIELD)
