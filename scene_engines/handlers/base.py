"""
Handler base -- Shared contract for component serialization strategies.

A handler turns one component into an ObjectNode of the shape
``{typeName, instanceID, ...}``.  Handlers never raise for a single bad
member; they record a diagnostic in the context's sink and move on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from scene_config.schema import SerializerConfig
from scene_engines.classifier import TypeClassifier
from scene_engines.hostile_extractor import HostileValueExtractor
from scene_engines.metadata_cache import MemberMetadataCache
from scene_engines.structural import AssetPathResolver, StructuralSerializer
from scene_kernel.domain.diagnostics import DiagnosticSink
from scene_kernel.domain.types import AccessPolicy, full_type_name
from scene_kernel.domain.values import ObjectNode, ScalarNode, SerializedNode
from scene_kernel.exceptions import (
    ConversionError,
    MemberAccessError,
    SerializationError,
)


class MatchMode(str, Enum):
    EXACT = "exact"
    DERIVED = "derived"


@dataclass(frozen=True)
class SerializationContext:
    """Everything a handler needs for one call."""

    policy: AccessPolicy
    sink: DiagnosticSink
    cache: MemberMetadataCache
    classifier: TypeClassifier
    extractor: HostileValueExtractor
    structural: StructuralSerializer
    config: SerializerConfig
    asset_database: AssetPathResolver | None = None
    is_playing: bool = False

    def read(self, obj: Any, member: str) -> Any:
        """Read one member in isolation; any failure becomes MemberAccessError."""
        try:
            return getattr(obj, member)
        except Exception as e:
            raise MemberAccessError(full_type_name(type(obj)), member, e) from e

    def fail(
        self,
        logger: logging.Logger,
        type_name: str,
        member: str,
        error: SerializationError,
    ) -> None:
        """Record a dropped member; conversion failures are also warned about."""
        self.sink.record_error(type_name, member, error)
        level = logging.WARNING if isinstance(error, ConversionError) else logging.DEBUG
        logger.log(
            level,
            "member_omitted",
            extra={
                "member": member,
                "failure_code": error.code,
                "reason": str(error),
            },
        )


class ComponentHandler(ABC):
    """A hand-written serializer that takes priority over reflection."""

    name: ClassVar[str]
    target: ClassVar[type]
    match_mode: ClassVar[MatchMode] = MatchMode.EXACT

    def matches(self, cls: type) -> bool:
        if self.match_mode is MatchMode.EXACT:
            return cls is self.target
        return issubclass(cls, self.target)

    @abstractmethod
    def serialize(self, component: Any, context: SerializationContext) -> ObjectNode:
        ...

    @staticmethod
    def header(component: Any) -> list[tuple[str, SerializedNode]]:
        return [
            ("typeName", ScalarNode(full_type_name(type(component)))),
            ("instanceID", ScalarNode(component.get_instance_id())),
        ]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(target={self.target.__name__}, mode={self.match_mode.value})"
