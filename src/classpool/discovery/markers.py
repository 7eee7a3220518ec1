"""Opt-in marker for discoverable classes."""
from __future__ import annotations

from typing import Any, Optional, TypeVar

INDEXED_MARKER = "__classpool_indexed__"

C = TypeVar("C", bound=type)


def indexed(cls: Optional[C] = None):
    """Mark a class as discoverable by classpool providers.

    Usable bare or called::

        @indexed
        class Jump(Action): ...

        @indexed()
        class Run(Action): ...

    The mark is stored on the class itself and is not inherited by
    subclasses; each subclass must opt in on its own.
    """

    def decorator(target: C) -> C:
        if not isinstance(target, type):
            raise TypeError(
                f"@indexed can only decorate classes, got {type(target).__name__}"
            )
        setattr(target, INDEXED_MARKER, True)
        return target

    if cls is None:
        return decorator
    return decorator(cls)


def is_indexed(obj: Any) -> bool:
    """Return True when ``obj`` is a class marked with :func:`indexed` directly."""
    return isinstance(obj, type) and vars(obj).get(INDEXED_MARKER, False) is True


__all__ = ["INDEXED_MARKER", "indexed", "is_indexed"]
