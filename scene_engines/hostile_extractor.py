"""
HostileValueExtractor -- Pulls meaningful data out of opaque hostile values.

Responsibility:
    Values held by networking components (ids, player refs, guids, network
    bools, typed identifiers) cannot be reflected over safely.  The
    extractor runs an ordered chain of narrow strategies; the first one that
    produces a node wins, and a value no strategy understands is reported
    as UNEXTRACTABLE so the caller can omit it.

Architecture position:
    Engines -- pure; reads only the attributes each strategy names.

Invariants enforced:
    - Strategy order is fixed: reference, guid, composite identifier,
      hostile array, scalar conversion, ``value`` accessor, ``raw`` accessor,
      enum.  First success wins.
    - An exception inside a strategy is that strategy failing, never the
      extraction failing.
    - ``extract(None)`` is NULL, which is distinct from UNEXTRACTABLE.

Failure modes:
    - None raised.  Strategy failures are logged at debug level.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from enum import Enum
from typing import Any, get_args, get_origin

from scene_config.schema import ExtractorConfig
from scene_engines.classifier import TypeClassifier
from scene_engines.structural import enum_to_int, scalar_node
from scene_kernel.domain.values import (
    NULL,
    UNEXTRACTABLE,
    ArrayNode,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
    SerializedNode,
)
from scene_kernel.host import HostObject
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.hostile_extractor")

ScalarAdapter = Callable[[Any], "bool | int | float | str"]

# Conversion dunders tried, in order, for types with no registered adapter.
_CONVERSION_DUNDERS: tuple[tuple[str, type], ...] = (
    ("__bool__", bool),
    ("__index__", int),
    ("__int__", int),
    ("__float__", float),
)

_COMPOSITE_ATTRIBUTES = ("kind", "is_valid", "is_prefab")


def _has_member(value: Any, name: str) -> bool:
    """True when ``name`` is declared on the type or set on the instance."""
    if any(name in klass.__dict__ for klass in type(value).__mro__):
        return True
    instance_dict = getattr(value, "__dict__", None)
    return isinstance(instance_dict, dict) and name in instance_dict


def _defines(cls: type, dunder: str) -> bool:
    return any(dunder in klass.__dict__ for klass in cls.__mro__ if klass is not object)


def _element_type(value: list | tuple, declared_type: Any) -> type | None:
    if get_origin(declared_type) in (list, tuple):
        args = [a for a in get_args(declared_type) if a is not Ellipsis]
        if args and isinstance(args[0], type):
            return args[0]
    for item in value:
        if item is not None:
            return type(item)
    return None


class HostileValueExtractor:
    """Ordered strategy chain over opaque hostile values."""

    def __init__(
        self,
        classifier: TypeClassifier,
        config: ExtractorConfig | None = None,
    ) -> None:
        self._classifier = classifier
        self._config = config or ExtractorConfig()
        self._adapters: dict[type, ScalarAdapter] = {}
        self._lock = threading.Lock()
        self._strategies: tuple[tuple[str, Callable[..., SerializedNode | None]], ...] = (
            ("reference", self._extract_reference),
            ("guid", self._extract_guid),
            ("composite", self._extract_composite),
            ("array", self._extract_array),
            ("scalar", self._extract_scalar),
            ("value", self._extract_value),
            ("raw", self._extract_raw),
            ("enum", self._extract_enum),
        )

    # -- scalar adapters -----------------------------------------------------

    def register_adapter(self, cls: type, adapter: ScalarAdapter) -> None:
        """Register an explicit scalar conversion for ``cls`` and subclasses."""
        with self._lock:
            self._adapters[cls] = adapter

    def unregister_adapter(self, cls: type) -> None:
        with self._lock:
            self._adapters.pop(cls, None)

    def _adapter_for(self, cls: type) -> ScalarAdapter | None:
        for klass in cls.__mro__:
            adapter = self._adapters.get(klass)
            if adapter is not None:
                return adapter
        return None

    # -- entry point ---------------------------------------------------------

    def strategy_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self._strategies)

    def extract(
        self,
        value: Any,
        runtime_type: type | None = None,
        *,
        declared_type: Any = None,
    ) -> SerializedNode | object:
        """Return a node, NULL for None, or UNEXTRACTABLE."""
        if value is None:
            return NULL
        runtime_type = runtime_type or type(value)
        for name, strategy in self._strategies:
            try:
                node = strategy(value, runtime_type, declared_type)
            except Exception as e:
                logger.debug(
                    "extraction_strategy_failed",
                    extra={
                        "strategy": name,
                        "value_type": runtime_type.__qualname__,
                        "error": f"{type(e).__name__}: {e}",
                    },
                )
                continue
            if node is not None:
                return node
        return UNEXTRACTABLE

    # -- strategies (None means "not applicable") ----------------------------

    def _extract_reference(self, value, runtime_type, declared_type):
        if isinstance(value, HostObject):
            return ReferenceNode(name=value.name, instance_id=value.get_instance_id())
        return None

    def _extract_guid(self, value, runtime_type, declared_type):
        attribute = self._config.guid_attribute
        if not _has_member(value, attribute):
            return None
        guid = getattr(value, attribute)
        if guid is None:
            return None
        return ScalarNode(str(guid))

    def _extract_composite(self, value, runtime_type, declared_type):
        if not all(_has_member(value, a) for a in _COMPOSITE_ATTRIBUTES):
            return None
        kind = value.kind
        is_prefab = bool(value.is_prefab)
        fields: list[tuple[str, SerializedNode]] = [
            ("kind", ScalarNode(kind.name if isinstance(kind, Enum) else str(kind))),
            ("isValid", ScalarNode(bool(value.is_valid))),
            ("isPrefab", ScalarNode(is_prefab)),
        ]
        if is_prefab and _has_member(value, "as_prefab_id"):
            try:
                fields.append(("prefabId", ScalarNode(str(value.as_prefab_id))))
            except Exception as e:
                logger.debug(
                    "prefab_id_unreadable",
                    extra={"value_type": runtime_type.__qualname__, "error": str(e)},
                )
        return ObjectNode(tuple(fields))

    def _extract_array(self, value, runtime_type, declared_type):
        if not isinstance(value, (list, tuple)):
            return None
        element_type = _element_type(value, declared_type)
        if (
            element_type is None
            or not issubclass(element_type, HostObject)
            or not self._classifier.is_hostile(element_type)
        ):
            return None
        items: list[SerializedNode] = []
        for item in value:
            if item is None:
                items.append(NULL)
            elif isinstance(item, HostObject):
                items.append(
                    ReferenceNode(name=item.name, instance_id=item.get_instance_id())
                )
        return ArrayNode(tuple(items))

    def _extract_scalar(self, value, runtime_type, declared_type):
        if isinstance(value, Enum):
            return None
        adapter = self._adapter_for(runtime_type)
        if adapter is not None:
            return scalar_node(adapter(value))
        primitive = scalar_node(value)
        if primitive is not None:
            return primitive
        for dunder, cast in _CONVERSION_DUNDERS:
            if _defines(runtime_type, dunder):
                return ScalarNode(cast(value))
        return None

    def _extract_value(self, value, runtime_type, declared_type):
        if isinstance(value, Enum):
            return None
        attribute = self._config.value_attribute
        if not _has_member(value, attribute):
            return None
        return scalar_node(getattr(value, attribute))

    def _extract_raw(self, value, runtime_type, declared_type):
        attribute = self._config.raw_attribute
        if not _has_member(value, attribute):
            return None
        raw_value = getattr(value, attribute)
        raw = NULL if raw_value is None else scalar_node(raw_value)
        if raw is None:
            return None
        fields: list[tuple[str, SerializedNode]] = [("raw", raw)]
        for binding in self._config.extras_for(runtime_type.__name__):
            try:
                extra = scalar_node(getattr(value, binding.attribute))
            except Exception as e:
                logger.debug(
                    "raw_extra_unreadable",
                    extra={"attribute": binding.attribute, "error": str(e)},
                )
                continue
            if extra is not None:
                fields.append((binding.key, extra))
        return ObjectNode(tuple(fields))

    def _extract_enum(self, value, runtime_type, declared_type):
        if isinstance(value, Enum):
            return ScalarNode(enum_to_int(value))
        return None
