"""
Configuration Loader (``scene_config.loader``).

Responsibility
--------------
Loads a serializer YAML file and parses it into the frozen
``scene_config.schema`` dataclasses.  The single public entry point for
runtime config is ``scene_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* A section of the wrong shape raises ``ConfigurationError``; missing
  sections fall back to the schema defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong section shape  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from scene_config.schema import (
    CameraConfig,
    ClassifierVocabulary,
    ExtractorConfig,
    MemberFilterConfig,
    PropertyBinding,
    SerializerConfig,
    StructuralConfig,
)
from scene_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("<root>", "document must be a mapping")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(name, "must be a mapping")
    return value


def _str_tuple(value: Any, section: str, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(section, f"'{key}' must be a list of strings")
    return tuple(value)


def _str_value(data: dict[str, Any], section: str, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(section, f"'{key}' must be a non-empty string")
    return value


def parse_binding(data: Any, section: str) -> PropertyBinding:
    """Parse a ``{key, attribute}`` pair."""
    if not isinstance(data, dict):
        raise ConfigurationError(section, f"binding must be a mapping, got {data!r}")
    try:
        key = data["key"]
        attribute = data["attribute"]
    except KeyError as e:
        raise ConfigurationError(section, f"binding is missing {e.args[0]!r}") from e
    if not isinstance(key, str) or not isinstance(attribute, str):
        raise ConfigurationError(section, "binding key and attribute must be strings")
    return PropertyBinding(key=key, attribute=attribute)


def _bindings(value: Any, section: str) -> tuple[PropertyBinding, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigurationError(section, "bindings must be a list")
    return tuple(parse_binding(item, section) for item in value)


def parse_classifier(data: dict[str, Any]) -> ClassifierVocabulary:
    """Parse the ``classifier`` section."""
    return ClassifierVocabulary(
        hostile_namespace_prefixes=_str_tuple(
            data.get("hostile_namespace_prefixes"), "classifier",
            "hostile_namespace_prefixes",
        ),
        hostile_namespace_fragments=_str_tuple(
            data.get("hostile_namespace_fragments"), "classifier",
            "hostile_namespace_fragments",
        ),
        hostile_type_names=_str_tuple(
            data.get("hostile_type_names"), "classifier", "hostile_type_names",
        ),
    )


def parse_members(data: dict[str, Any]) -> MemberFilterConfig:
    """Parse the ``members`` section."""
    by_type_raw = data.get("skipped_by_type") or {}
    if not isinstance(by_type_raw, dict):
        raise ConfigurationError("members", "'skipped_by_type' must be a mapping")
    by_type = tuple(
        (type_name, _str_tuple(names, "members", f"skipped_by_type.{type_name}"))
        for type_name, names in by_type_raw.items()
    )

    subs_raw = data.get("edit_mode_substitutions") or {}
    if not isinstance(subs_raw, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in subs_raw.items()
    ):
        raise ConfigurationError(
            "members", "'edit_mode_substitutions' must map names to names"
        )

    return MemberFilterConfig(
        skipped=_str_tuple(data.get("skipped"), "members", "skipped"),
        skipped_by_type=by_type,
        edit_mode_substitutions=tuple(subs_raw.items()),
    )


def parse_extractor(data: dict[str, Any]) -> ExtractorConfig:
    """Parse the ``extractor`` section."""
    extras_raw = data.get("raw_extras") or {}
    if not isinstance(extras_raw, dict):
        raise ConfigurationError("extractor", "'raw_extras' must be a mapping")
    defaults = ExtractorConfig()
    return ExtractorConfig(
        guid_attribute=_str_value(
            data, "extractor", "guid_attribute", defaults.guid_attribute
        ),
        raw_attribute=_str_value(
            data, "extractor", "raw_attribute", defaults.raw_attribute
        ),
        value_attribute=_str_value(
            data, "extractor", "value_attribute", defaults.value_attribute
        ),
        raw_extras=tuple(
            (type_name, _bindings(bindings, "extractor"))
            for type_name, bindings in extras_raw.items()
        ),
    )


def parse_camera(data: dict[str, Any]) -> CameraConfig:
    """Parse the ``camera`` section."""
    return CameraConfig(properties=_bindings(data.get("properties"), "camera"))


def parse_structural(data: dict[str, Any]) -> StructuralConfig:
    """Parse the ``structural`` section."""
    max_depth = data.get("max_depth", StructuralConfig.max_depth)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise ConfigurationError("structural", "'max_depth' must be a positive integer")
    return StructuralConfig(max_depth=max_depth)


def parse_serializer_config(
    data: dict[str, Any], source: str = ""
) -> SerializerConfig:
    """
    Parse a complete ``SerializerConfig`` from a dict.

    Postconditions:
        - Returns a frozen ``SerializerConfig`` whose ``checksum`` is the
          SHA-256 of ``data``.
    Raises:
        ConfigurationError: if any section has the wrong shape.
    """
    return SerializerConfig(
        classifier=parse_classifier(_section(data, "classifier")),
        members=parse_members(_section(data, "members")),
        extractor=parse_extractor(_section(data, "extractor")),
        camera=parse_camera(_section(data, "camera")),
        structural=parse_structural(_section(data, "structural")),
        checksum=compute_checksum(data),
        source=source,
    )


def load_serializer_config(path: Path) -> SerializerConfig:
    """Load and parse one YAML configuration file."""
    return parse_serializer_config(load_yaml_file(path), source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
