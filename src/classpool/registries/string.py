"""Registries keyed by class name relative to the scanned namespace."""
from __future__ import annotations

from typing import Any, TypeVar

from classpool.discovery import TypeDescriptor

from .keyed import KeyedRegistry

T = TypeVar("T")


def derive_string_key(instance: Any, descriptor: TypeDescriptor, namespace: str) -> str:
    """Strip the leading ``namespace + "."`` from the descriptor's qualified name.

    Only that one leading occurrence is removed. A class found in a
    sub-package keeps its sub-package path: ``pkg.actions.air.Glide``
    scanned from ``pkg.actions`` is keyed ``air.Glide``.

    Raises:
        ValueError: If the qualified name is not inside ``namespace``
    """
    prefix = namespace + "."
    name = descriptor.qualified_name
    if not name.startswith(prefix) or len(name) == len(prefix):
        raise ValueError(f"{name!r} is not inside namespace {namespace!r}")
    return name[len(prefix):]


class StringKeyedRegistry(KeyedRegistry[T, str]):
    """Registry keyed by namespace-relative class name.

    Example:
        >>> actions = StringKeyedRegistry.from_namespace("game.actions", Action)
        >>> sorted(actions.stored_keys())
        ['Jump', 'Run', 'air.Glide']
        >>> actions.get("Jump")
        <game.actions.jump.Jump object at ...>
    """

    derive_key = staticmethod(derive_string_key)


__all__ = ["StringKeyedRegistry", "derive_string_key"]
