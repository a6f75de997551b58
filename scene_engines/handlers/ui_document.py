"""
UIDocumentHandler -- Serializes UI documents without their visual tree.

The visual tree under ``root_visual_element`` links parents and children in
both directions, so reflecting over it never terminates.  This handler
reads a fixed set of members and never touches the tree.
"""

from __future__ import annotations

from typing import Any

from scene_engines.handlers.base import (
    ComponentHandler,
    MatchMode,
    SerializationContext,
)
from scene_engines.structural import reference_node, scalar_node
from scene_kernel.domain.types import full_type_name
from scene_kernel.domain.values import (
    NULL,
    ObjectNode,
    ReferenceNode,
    ScalarNode,
    SerializedNode,
)
from scene_kernel.exceptions import ConversionError, MemberAccessError
from scene_kernel.host import HostObject, UIDocument
from scene_kernel.logging_config import get_logger

logger = get_logger("engines.handlers.ui_document")

VISUAL_TREE_NOTE = "rootVisualElement skipped to prevent circular reference loops"


class UIDocumentHandler(ComponentHandler):
    name = "ui_document"
    target = UIDocument
    match_mode = MatchMode.DERIVED

    def serialize(self, component: UIDocument, context: SerializationContext) -> ObjectNode:
        properties: list[tuple[str, SerializedNode]] = []

        def add(key: str, attribute: str, convert: Any) -> None:
            try:
                value = context.read(component, attribute)
            except MemberAccessError as e:
                context.fail(logger, e.type_name, key, e)
                return
            try:
                node = convert(value)
            except Exception as e:
                error = ConversionError(type(value).__name__, f"{type(e).__name__}: {e}")
                context.fail(logger, full_type_name(type(component)), key, error)
                return
            if node is not None:
                properties.append((key, node))

        def asset(value: Any) -> SerializedNode:
            if not isinstance(value, HostObject):
                return NULL
            return reference_node(value, context.asset_database, include_asset_path=True)

        def scene_reference(value: Any) -> SerializedNode:
            if not isinstance(value, HostObject):
                return NULL
            return ReferenceNode(name=value.name, instance_id=value.get_instance_id())

        add("panelSettings", "panel_settings", asset)
        add("visualTreeAsset", "visual_tree_asset", asset)
        add("sortingOrder", "sorting_order", scalar_node)
        add("enabled", "enabled", scalar_node)
        add("parentUI", "parent_ui", scene_reference)
        properties.append(("_note", ScalarNode(VISUAL_TREE_NOTE)))

        return ObjectNode(tuple(self.header(component) + [
            ("properties", ObjectNode(tuple(properties))),
        ]))
