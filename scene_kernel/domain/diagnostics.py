"""
Diagnostics -- Per-member failure records collected during one serialization.

Handlers never let a member failure unwind the object.  Instead each failure
is turned into a SerializationDiagnostic and recorded in the DiagnosticSink
passed down with the call, so callers (and tests) can see exactly which
members were dropped and why.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from scene_kernel.exceptions import (
    ConversionError,
    ExtractionError,
    MemberAccessError,
    SerializationError,
)


class FailureKind(str, Enum):
    ACCESS = "access"
    EXTRACTION = "extraction"
    CONVERSION = "conversion"


_KIND_BY_ERROR: dict[type[SerializationError], FailureKind] = {
    MemberAccessError: FailureKind.ACCESS,
    ExtractionError: FailureKind.EXTRACTION,
    ConversionError: FailureKind.CONVERSION,
}


@dataclass(frozen=True, slots=True)
class SerializationDiagnostic:
    type_name: str
    member: str
    kind: FailureKind
    message: str
    code: str = ""


class DiagnosticSink:
    """Append-only collector for one serialization call."""

    def __init__(self) -> None:
        self._diagnostics: list[SerializationDiagnostic] = []

    def record(
        self,
        type_name: str,
        member: str,
        kind: FailureKind,
        message: str,
        code: str = "",
    ) -> SerializationDiagnostic:
        diagnostic = SerializationDiagnostic(type_name, member, kind, message, code)
        self._diagnostics.append(diagnostic)
        return diagnostic

    def record_error(
        self, type_name: str, member: str, error: SerializationError
    ) -> SerializationDiagnostic:
        kind = _KIND_BY_ERROR.get(type(error), FailureKind.CONVERSION)
        return self.record(type_name, member, kind, str(error), error.code)

    @property
    def diagnostics(self) -> tuple[SerializationDiagnostic, ...]:
        return tuple(self._diagnostics)

    def by_kind(self, kind: FailureKind) -> tuple[SerializationDiagnostic, ...]:
        return tuple(d for d in self._diagnostics if d.kind is kind)

    def members(self) -> tuple[str, ...]:
        return tuple(d.member for d in self._diagnostics)

    def __len__(self) -> int:
        return len(self._diagnostics)

    def __bool__(self) -> bool:
        return bool(self._diagnostics)
