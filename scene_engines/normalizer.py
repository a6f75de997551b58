"""
OutputNormalizer -- Flattens the SerializedNode tree to plain JSON data.

Responsibility:
    Turn nodes into dict / list / scalars / None that the ``json`` backend
    encodes with ``allow_nan=False``.

Invariants enforced:
    - Object key order and array order (including nulls) are preserved.
    - A reference gets ``assetPath`` when it asks for it (null when
      unknown) or when a path is known.
    - A value the backend cannot represent costs only the nearest object
      key: that key is dropped and a warning is logged.

Failure modes:
    - ConversionError escapes ``normalize`` only when the root node itself
      cannot be represented.
"""

from __future__ import annotations

import json
import math
from typing import Any

from scene_engines.tracer import traced_engine
from scene_kernel.domain.diagnostics import DiagnosticSink
from scene_kernel.domain.values import (
    ArrayNode,
    NullNode,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
    SerializedNode,
)
from scene_kernel.exceptions import ConversionError
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.normalizer")


def reference_to_dict(node: ReferenceNode) -> dict[str, Any]:
    data: dict[str, Any] = {"name": node.name, "instanceID": node.instance_id}
    if node.include_asset_path or node.asset_path:
        data["assetPath"] = node.asset_path or None
    return data


class OutputNormalizer:
    """Converts nodes to JSON-compatible Python data."""

    @traced_engine("normalizer", "1.0")
    def normalize(
        self,
        node: SerializedNode,
        sink: DiagnosticSink | None = None,
        *,
        type_name: str = "",
    ) -> Any:
        return self._normalize(node, sink, type_name)

    def to_json(self, node: SerializedNode, **dumps_kwargs: Any) -> str:
        return json.dumps(self.normalize(node), allow_nan=False, **dumps_kwargs)

    def _normalize(
        self, node: SerializedNode, sink: DiagnosticSink | None, type_name: str
    ) -> Any:
        if isinstance(node, NullNode):
            return None
        if isinstance(node, ScalarNode):
            return self._scalar(node.value)
        if isinstance(node, ReferenceNode):
            return reference_to_dict(node)
        if isinstance(node, ObjectNode):
            data: dict[str, Any] = {}
            for key, child in node.fields:
                try:
                    data[key] = self._normalize(child, sink, type_name)
                except ConversionError as e:
                    if sink is not None:
                        sink.record_error(type_name, key, e)
                    logger.warning(
                        "member_omitted",
                        extra={
                            "member": key,
                            "failure_code": e.code,
                            "reason": e.reason,
                        },
                    )
            return data
        if isinstance(node, ArrayNode):
            return [self._normalize(item, sink, type_name) for item in node.items]
        raise ConversionError(type(node).__name__, "not a serialized node")

    @staticmethod
    def _scalar(value: Any) -> Any:
        if isinstance(value, float) and not math.isfinite(value):
            raise ConversionError("float", f"{value!r} is not valid JSON")
        if not isinstance(value, (bool, int, float, str)):
            raise ConversionError(type(value).__name__, "not a JSON scalar")
        return value
