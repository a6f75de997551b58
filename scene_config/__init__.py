"""
scene_config -- single public entrypoint for serializer configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Engines receive a frozen ``SerializerConfig``
    and never read YAML themselves.

Architecture position:
    Configuration -- sits above ``scene_kernel`` and beside
    ``scene_engines``.  The kernel MUST NEVER import from ``scene_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Deterministic: the same YAML always yields the same checksum.
    - The packaged defaults are parsed once per process.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- a section has the wrong shape.

Every successful ``get_active_config()`` call emits a ``SCENE_CONFIG_TRACE``
log entry with the source, checksum and vocabulary sizes.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from scene_config.loader import load_serializer_config
from scene_config.schema import (
    CameraConfig,
    ClassifierVocabulary,
    ExtractorConfig,
    MemberFilterConfig,
    PropertyBinding,
    SerializerConfig,
    StructuralConfig,
)

_logger = logging.getLogger("scene_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

_default_config: SerializerConfig | None = None
_default_lock = threading.Lock()


def get_active_config(config_path: Path | None = None) -> SerializerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to the packaged
            ``scene_config/defaults.yaml``, which is cached after the
            first load.

    Returns:
        SerializerConfig -- frozen and validated.

    Raises:
        FileNotFoundError, yaml.YAMLError, ConfigurationError.
    """
    global _default_config
    if config_path is None:
        with _default_lock:
            if _default_config is None:
                _default_config = load_serializer_config(DEFAULT_CONFIG_PATH)
            config = _default_config
    else:
        config = load_serializer_config(Path(config_path))

    _logger.info(
        "SCENE_CONFIG_TRACE",
        extra={
            "trace_type": "SCENE_CONFIG_TRACE",
            "source": config.source,
            "checksum": config.checksum,
            "hostile_prefixes": len(config.classifier.hostile_namespace_prefixes),
            "hostile_type_names": len(config.classifier.hostile_type_names),
            "camera_properties": len(config.camera.properties),
            "max_depth": config.structural.max_depth,
        },
    )
    return config


def clear_config_cache() -> None:
    """Forget the cached default configuration. FOR TESTING ONLY."""
    global _default_config
    with _default_lock:
        _default_config = None


__all__ = [
    "CameraConfig",
    "ClassifierVocabulary",
    "DEFAULT_CONFIG_PATH",
    "ExtractorConfig",
    "MemberFilterConfig",
    "PropertyBinding",
    "SerializerConfig",
    "StructuralConfig",
    "clear_config_cache",
    "get_active_config",
]
