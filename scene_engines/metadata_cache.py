"""
MemberMetadataCache -- Memoized, ordered member lists per (type, policy).

Responsibility:
    Discover which fields and properties of a component type are
    serializable under an AccessPolicy, and memoize the answer for the
    lifetime of the process.  Discovery itself is the pure function
    ``declared_members``; the cache only stores its results.

Architecture position:
    Engines -- shared process-wide state, otherwise pure.

Invariants enforced:
    - Members are enumerated level by level from the concrete type up to
      (not including) MonoBehaviour, or up to ``object`` for components
      that are not scripts.  Only names declared locally at a level count.
    - Output order is properties then fields, each leaf to root, in
      declaration order within a class.
    - A name recorded at a more-derived level shadows the same name below.
    - Once stored, a CacheEntry is never replaced.  Concurrent builders
      produce identical entries and the first insert wins.

Failure modes:
    - Annotations that cannot be evaluated fall back to their raw string
      form; such members are still listed, with an unresolved declared type.
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Iterable
from functools import cached_property
from typing import Annotated, Any, ClassVar, get_args, get_origin

from scene_config.schema import MemberFilterConfig
from scene_kernel.domain.types import (
    AccessPolicy,
    CacheEntry,
    MemberDescriptor,
    MemberKind,
    full_type_name,
)
from scene_kernel.host import MonoBehaviour, SerializeField

_UNRESOLVED_ANNOTATION_ERRORS = (NameError, SyntaxError, TypeError, AttributeError)


def member_levels(cls: type) -> tuple[type, ...]:
    """Classes whose local declarations contribute members, leaf first."""
    levels: list[type] = []
    for klass in cls.__mro__:
        if klass is MonoBehaviour or klass is object:
            break
        levels.append(klass)
    return tuple(levels)


def is_synthesized(name: str, owner: type) -> bool:
    """Dunder names and name-mangled private names are never serialized."""
    if name.startswith("__") and name.endswith("__"):
        return True
    return name.startswith(f"_{owner.__name__.lstrip('_')}__")


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def is_serialize_marked(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return "SerializeField" in annotation
    if get_origin(annotation) is not Annotated:
        return False
    return any(
        meta is SerializeField or isinstance(meta, SerializeField)
        for meta in annotation.__metadata__
    )


def unwrap_annotation(annotation: Any) -> Any:
    """Strip ``Annotated`` metadata, leaving the declared type."""
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def _annotations(obj: Any) -> dict[str, Any]:
    try:
        return inspect.get_annotations(obj, eval_str=True)
    except _UNRESOLVED_ANNOTATION_ERRORS:
        return inspect.get_annotations(obj)


def declared_fields(cls: type) -> list[tuple[str, Any]]:
    """Fields declared locally on ``cls``: annotations, then extra ``__slots__``."""
    annotations = _annotations(cls)
    fields = [
        (name, annotation)
        for name, annotation in annotations.items()
        if not is_synthesized(name, cls) and not _is_class_var(annotation)
    ]
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    for name in slots:
        if name not in annotations and not is_synthesized(name, cls):
            fields.append((name, None))
    return fields


def declared_properties(cls: type) -> list[tuple[str, Any]]:
    """Readable properties declared locally on ``cls`` with their return type."""
    properties: list[tuple[str, Any]] = []
    for name, attr in cls.__dict__.items():
        if isinstance(attr, property):
            getter = attr.fget
        elif isinstance(attr, cached_property):
            getter = attr.func
        else:
            continue
        if getter is None or is_synthesized(name, cls):
            continue
        properties.append((name, _annotations(getter).get("return")))
    return properties


def declared_members(
    cls: type,
    policy: AccessPolicy,
    skipped: Iterable[str] = (),
) -> tuple[MemberDescriptor, ...]:
    """
    Ordered serializable members of ``cls`` under ``policy``.

    Pure: the same arguments always give the same tuple.
    """
    skipped = frozenset(skipped)
    levels = member_levels(cls)
    seen: set[str] = set()
    properties: list[MemberDescriptor] = []
    fields: list[MemberDescriptor] = []

    for level in levels:
        for name, annotation in declared_properties(level):
            if name in seen or name in skipped or name.startswith("_"):
                continue
            seen.add(name)
            properties.append(MemberDescriptor(
                name=name,
                kind=MemberKind.PROPERTY,
                declared_on=level,
                declared_type=annotation,
            ))

    for level in levels:
        for name, annotation in declared_fields(level):
            if name in seen or name in skipped:
                continue
            is_public = not name.startswith("_")
            marked = is_serialize_marked(annotation)
            if not is_field_included(is_public, marked, policy):
                continue
            seen.add(name)
            fields.append(MemberDescriptor(
                name=name,
                kind=MemberKind.FIELD,
                declared_on=level,
                declared_type=unwrap_annotation(annotation),
                is_public=is_public,
                is_serialize_marked=marked,
            ))

    return tuple(properties) + tuple(fields)


def is_field_included(is_public: bool, marked: bool, policy: AccessPolicy) -> bool:
    """Public fields always; non-public ones only when marked and allowed."""
    if is_public:
        return True
    return marked and policy.include_non_public_serialized_fields


class MemberMetadataCache:
    """Process-lifetime memo of ``declared_members`` keyed by (type, policy)."""

    def __init__(self, filters: MemberFilterConfig | None = None) -> None:
        self._filters = filters or MemberFilterConfig()
        self._entries: dict[tuple[type, AccessPolicy], CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def filters(self) -> MemberFilterConfig:
        return self._filters

    def skipped_for(self, cls: type) -> frozenset[str]:
        return self._filters.skipped_for(full_type_name(k) for k in cls.__mro__)

    def members_for(self, cls: type, policy: AccessPolicy) -> CacheEntry:
        key = (cls, policy)
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        built = CacheEntry(
            type=cls,
            policy=policy,
            members=declared_members(cls, policy, self.skipped_for(cls)),
        )
        with self._lock:
            return self._entries.setdefault(key, built)

    def clear(self) -> None:
        """Drop every entry. FOR TESTING ONLY."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
