"""
SerializerConfig schema.

Defines the reviewable vocabulary the engine runs with: which namespaces and
type names are hostile, which members are never touched, where the extractor
looks for raw values, and which camera properties are allow-listed.  YAML
files are parsed into these types by the loader; engines only ever see the
frozen dataclasses.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Classifier vocabulary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassifierVocabulary:
    """Pattern fallback used when no typed registry entry decides a level."""

    hostile_namespace_prefixes: tuple[str, ...] = ()
    hostile_namespace_fragments: tuple[str, ...] = ()
    hostile_type_names: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Member filtering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemberFilterConfig:
    """Members the metadata cache drops, and edit-mode read substitutions."""

    skipped: tuple[str, ...] = ()
    # (full type name, member names); applies to the type and its subclasses
    skipped_by_type: tuple[tuple[str, tuple[str, ...]], ...] = ()
    # (member read in play mode, member read instead in edit mode)
    edit_mode_substitutions: tuple[tuple[str, str], ...] = ()

    def skipped_for(self, type_names: Iterable[str]) -> frozenset[str]:
        names = set(self.skipped)
        wanted = set(type_names)
        for type_name, members in self.skipped_by_type:
            if type_name in wanted:
                names.update(members)
        return frozenset(names)

    def substitution_for(self, member: str) -> str | None:
        for original, replacement in self.edit_mode_substitutions:
            if original == member:
                return replacement
        return None


# ---------------------------------------------------------------------------
# Extraction and special handlers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertyBinding:
    """Output key bound to a host attribute name."""

    key: str
    attribute: str


@dataclass(frozen=True)
class ExtractorConfig:
    guid_attribute: str = "raw_guid_value"
    raw_attribute: str = "raw"
    value_attribute: str = "value"
    # (bare type name, extra keys written next to "raw")
    raw_extras: tuple[tuple[str, tuple[PropertyBinding, ...]], ...] = ()

    def extras_for(self, bare_type_name: str) -> tuple[PropertyBinding, ...]:
        for type_name, bindings in self.raw_extras:
            if type_name == bare_type_name:
                return bindings
        return ()


@dataclass(frozen=True)
class CameraConfig:
    properties: tuple[PropertyBinding, ...] = ()


@dataclass(frozen=True)
class StructuralConfig:
    max_depth: int = 8


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SerializerConfig:
    """The complete, validated serializer configuration."""

    classifier: ClassifierVocabulary = field(default_factory=ClassifierVocabulary)
    members: MemberFilterConfig = field(default_factory=MemberFilterConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    structural: StructuralConfig = field(default_factory=StructuralConfig)
    checksum: str = ""
    source: str = ""
