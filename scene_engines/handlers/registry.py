"""HandlerRegistry -- Component type to special-case handler dispatch."""

from __future__ import annotations

import threading

from scene_engines.handlers.base import ComponentHandler
from scene_engines.handlers.camera import CameraHandler
from scene_engines.handlers.transform import TransformHandler
from scene_engines.handlers.ui_document import UIDocumentHandler
from scene_kernel.exceptions import HandlerRegistrationError


class HandlerRegistry:
    """Ordered special-case handlers; the first match wins."""

    def __init__(self) -> None:
        self._handlers: list[ComponentHandler] = []
        self._lock = threading.Lock()

    def register(self, handler: ComponentHandler) -> ComponentHandler:
        """Append a handler, rejecting a second one for the same target and mode."""
        with self._lock:
            for existing in self._handlers:
                if (
                    existing.target is handler.target
                    and existing.match_mode is handler.match_mode
                ):
                    raise HandlerRegistrationError(
                        handler.name, handler.target.__qualname__, existing.name
                    )
                if existing.name == handler.name:
                    raise HandlerRegistrationError(
                        handler.name, handler.target.__qualname__, existing.name
                    )
            self._handlers.append(handler)
        return handler

    def unregister(self, name: str) -> bool:
        with self._lock:
            for i, handler in enumerate(self._handlers):
                if handler.name == name:
                    del self._handlers[i]
                    return True
        return False

    def resolve(self, cls: type) -> ComponentHandler | None:
        for handler in tuple(self._handlers):
            if handler.matches(cls):
                return handler
        return None

    def list_handlers(self) -> list[str]:
        return [handler.name for handler in self._handlers]

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __len__(self) -> int:
        return len(self._handlers)


def default_registry() -> HandlerRegistry:
    """Registry holding the built-in Transform, Camera and UIDocument handlers."""
    registry = HandlerRegistry()
    registry.register(TransformHandler())
    registry.register(CameraHandler())
    registry.register(UIDocumentHandler())
    return registry
