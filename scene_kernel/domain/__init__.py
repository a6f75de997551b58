"""
Pure domain layer.

Immutable value objects shared by the engines: classification and access
policy, member metadata, the intermediate SerializedNode tree, and the
per-member diagnostics.  No dependencies on the host model or on I/O.
"""

from scene_kernel.domain.diagnostics import (
    DiagnosticSink,
    FailureKind,
    SerializationDiagnostic,
)
from scene_kernel.domain.types import (
    AccessPolicy,
    CacheEntry,
    Classification,
    MemberDescriptor,
    MemberKind,
    TypeDescriptor,
    full_type_name,
)
from scene_kernel.domain.values import (
    NULL,
    UNEXTRACTABLE,
    ArrayNode,
    NullNode,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
    SerializedNode,
)

__all__ = [
    "AccessPolicy",
    "ArrayNode",
    "CacheEntry",
    "Classification",
    "DiagnosticSink",
    "FailureKind",
    "MemberDescriptor",
    "MemberKind",
    "NULL",
    "NullNode",
    "ObjectNode",
    "ReferenceNode",
    "ScalarNode",
    "SerializationDiagnostic",
    "SerializedNode",
    "TypeDescriptor",
    "UNEXTRACTABLE",
    "full_type_name",
]
