"""
TypeClassifier -- Flags a runtime type as Hostile or Safe by its ancestry.

Responsibility:
    Decide whether a component type belongs to a networking library whose
    members misbehave outside a live simulation.  The decision walks the
    type's ancestry from the leaf up to (not including) the host roots and
    stops at the first hostile level.

Architecture position:
    Engines -- pure function of (type, vocabulary, typed registry).  No I/O.

Invariants enforced:
    - Hostile is sticky: one hostile level makes the whole type hostile.
    - A typed registry entry decides its own level before any pattern is
      consulted.  A SAFE entry clears that level only; bases are still walked.
    - A type that matches no rule is Safe.

Failure modes:
    - None.  Unresolvable annotations (forward-reference strings) are Safe.
"""

from __future__ import annotations

import threading
from typing import Annotated, Any, get_args, get_origin

from scene_config.schema import ClassifierVocabulary
from scene_kernel.domain.types import Classification, TypeDescriptor
from scene_kernel.host import Behaviour, Component, HostObject, MonoBehaviour

HOST_ROOTS: tuple[type, ...] = (MonoBehaviour, Behaviour, Component, HostObject, object)


def ancestry(cls: type, roots: tuple[type, ...] = HOST_ROOTS) -> tuple[type, ...]:
    """Leaf-to-root chain of ``cls``, cut at the first host root."""
    chain: list[type] = []
    for klass in cls.__mro__:
        if klass in roots:
            break
        chain.append(klass)
    return tuple(chain)


def describe(cls: type, roots: tuple[type, ...] = HOST_ROOTS) -> TypeDescriptor:
    return TypeDescriptor(type=cls, ancestry=ancestry(cls, roots))


class TypeClassifier:
    """Typed registry first, configurable name patterns as fallback."""

    def __init__(
        self,
        vocabulary: ClassifierVocabulary | None = None,
        *,
        roots: tuple[type, ...] = HOST_ROOTS,
    ) -> None:
        vocabulary = vocabulary or ClassifierVocabulary()
        self._prefixes = tuple(p.lower() for p in vocabulary.hostile_namespace_prefixes)
        self._fragments = tuple(f.lower() for f in vocabulary.hostile_namespace_fragments)
        self._names = frozenset(n.lower() for n in vocabulary.hostile_type_names)
        self._roots = roots
        self._registry: dict[type, Classification] = {}
        self._lock = threading.Lock()

    # -- typed registry ------------------------------------------------------

    def register(self, cls: type, classification: Classification) -> None:
        """Pin the classification of one exact class level."""
        with self._lock:
            self._registry[cls] = classification

    def unregister(self, cls: type) -> None:
        with self._lock:
            self._registry.pop(cls, None)

    def registered(self) -> dict[type, Classification]:
        return dict(self._registry)

    # -- classification ------------------------------------------------------

    def classify(self, cls: type) -> Classification:
        for level in ancestry(cls, self._roots):
            if self._level_is_hostile(level):
                return Classification.HOSTILE
        return Classification.SAFE

    def is_hostile(self, cls: type) -> bool:
        return self.classify(cls) is Classification.HOSTILE

    def classify_value(self, value: Any) -> Classification:
        if value is None:
            return Classification.SAFE
        return self.classify(type(value))

    def classify_annotation(self, annotation: Any) -> Classification:
        """
        Classify a declared member type.

        Handles plain classes, ``Annotated[X, ...]``, unions and generic
        aliases such as ``list[X]``; a construct is hostile when its origin
        or any argument is.
        """
        if annotation is None or isinstance(annotation, str):
            return Classification.SAFE
        origin = get_origin(annotation)
        if origin is Annotated:
            return self.classify_annotation(get_args(annotation)[0])
        if origin is not None:
            if isinstance(origin, type) and self.is_hostile(origin):
                return Classification.HOSTILE
            for arg in get_args(annotation):
                if self.classify_annotation(arg) is Classification.HOSTILE:
                    return Classification.HOSTILE
            return Classification.SAFE
        if isinstance(annotation, type):
            return self.classify(annotation)
        return Classification.SAFE

    def _level_is_hostile(self, level: type) -> bool:
        explicit = self._registry.get(level)
        if explicit is not None:
            return explicit is Classification.HOSTILE
        namespace = (level.__module__ or "").lower()
        if any(namespace.startswith(prefix) for prefix in self._prefixes):
            return True
        if any(fragment in namespace for fragment in self._fragments):
            return True
        return level.__name__.lower() in self._names
