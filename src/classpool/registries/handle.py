"""Explicitly initialized, process-wide registry holders."""
from __future__ import annotations

import threading
from typing import Any, Callable, Generic, Optional, Type, TypeVar

from classpool import logger
from classpool.exceptions import RegistryNotInitializedError

from .grouped import GroupedRegistry
from .keyed import KeyedRegistry

R = TypeVar("R", bound=KeyedRegistry)


class RegistryHandle(Generic[R]):
    """Hold a registry that is built once, when the host says so.

    Module-level registries built at import time depend on import order.
    A handle defers the build to an explicit :meth:`initialize` call, usually
    made during application start-up, and fails loudly if the registry is
    read before that.

    Example:
        >>> ACTIONS = RegistryHandle.for_namespace(StringKeyedRegistry, "game.actions", Action)
        >>> ACTIONS.initialize()   # at start-up
        >>> ACTIONS.get().get("Jump")
    """

    def __init__(self, factory: Callable[[], R], name: Optional[str] = None) -> None:
        self._factory = factory
        self._name = name or getattr(factory, "__qualname__", repr(factory))
        self._registry: Optional[R] = None
        self._lock = threading.Lock()

    @classmethod
    def for_namespace(
        cls,
        registry_type: Type[R],
        namespace: str,
        base_type: type,
        **kwargs: Any,
    ) -> "RegistryHandle[R]":
        """Create a handle that builds ``registry_type`` from ``namespace``.

        Raises:
            TypeError: If ``registry_type`` is a :class:`GroupedRegistry`, which
                is composed from built registries rather than discovered
        """
        if issubclass(registry_type, GroupedRegistry):
            raise TypeError(
                f"{registry_type.__name__} cannot be built from a namespace; "
                f"wrap a factory that composes it in RegistryHandle instead"
            )

        def factory() -> R:
            return registry_type.from_namespace(namespace, base_type, **kwargs)

        return cls(factory, name=f"{registry_type.__name__}({namespace})")

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_initialized(self) -> bool:
        return self._registry is not None

    def initialize(self) -> R:
        """Build the registry on first call and return it on every call.

        Concurrent callers wait for the single build. If the factory raises,
        the handle stays uninitialized and the error propagates.
        """
        registry = self._registry
        if registry is not None:
            return registry

        with self._lock:
            if self._registry is None:
                logger.info("Initializing registry handle {}", self._name)
                self._registry = self._factory()
            return self._registry

    def get(self) -> R:
        """Return the built registry.

        Raises:
            RegistryNotInitializedError: If :meth:`initialize` has not completed
        """
        registry = self._registry
        if registry is None:
            raise RegistryNotInitializedError(
                f"Registry handle {self._name} was read before initialize()",
                context={'handle': self._name},
            )
        return registry

    def __repr__(self) -> str:
        state = "initialized" if self.is_initialized else "uninitialized"
        return f"{self.__class__.__name__}({self._name}, {state})"


__all__ = ["RegistryHandle"]
