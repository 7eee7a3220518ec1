"""
Read side of a classpool registry.

A :class:`KeyedRegistry` maps keys to the single instance built for each
discovered class. It is immutable after construction, so any number of
threads may call :meth:`~KeyedRegistry.get` and
:meth:`~KeyedRegistry.stored_keys` concurrently without locking.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import (
    AbstractSet,
    Any,
    Generic,
    Hashable,
    ItemsView,
    Iterator,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from classpool.discovery import DiscoveryProvider, TypeDescriptor
from classpool.exceptions import EntryNotFoundError, qualified_type_name

from .builder import KeyPolicy, RegistryBuilder

T = TypeVar("T")
I = TypeVar("I", bound=Hashable)


class KeyedRegistry(Generic[T, I]):
    """Immutable mapping from key to instance for one base type.

    Subclasses choose how keys are derived by overriding :meth:`derive_key`;
    :class:`~classpool.registries.string.StringKeyedRegistry` keys by class
    name relative to the namespace.

    Args:
        base_type: Type every stored instance implements
        index: Key to instance mapping; ``None`` gives an empty registry
        namespace: Namespace the index was built from, if any

    Raises:
        TypeError: If a supplied entry is ``None`` or not a ``base_type`` instance
    """

    def __init__(
        self,
        base_type: Type[T],
        index: Optional[Mapping[I, T]] = None,
        *,
        namespace: Optional[str] = None,
    ) -> None:
        self._base_type = base_type
        self._namespace = namespace
        entries = dict(index or {})
        for key, value in entries.items():
            if value is None or not isinstance(value, base_type):
                raise TypeError(
                    f"Entry {key!r} is a {type(value).__name__}, not a "
                    f"{qualified_type_name(base_type)}"
                )
        self._index: Mapping[I, T] = MappingProxyType(entries)

    @classmethod
    def from_namespace(
        cls,
        namespace: str,
        base_type: Type[T],
        *,
        provider: Optional[DiscoveryProvider] = None,
        key_policy: Optional[KeyPolicy] = None,
    ) -> "KeyedRegistry[T, I]":
        """Discover and index every ``base_type`` implementation under ``namespace``.

        Args:
            namespace: Dotted namespace to scan, e.g. ``"game.actions"``
            base_type: Base class or runtime-checkable protocol to collect
            provider: Discovery provider (package scanning by default)
            key_policy: Key derivation override; defaults to :meth:`derive_key`

        Raises:
            BuildError: If any part of the build fails
            TypeError: If no key policy is available
        """
        if key_policy is None:
            if cls.derive_key is KeyedRegistry.derive_key:
                raise TypeError(
                    f"{cls.__name__} has no key policy; subclass it and override "
                    f"derive_key, or pass key_policy"
                )
            key_policy = cls.derive_key

        index = RegistryBuilder(provider).build(namespace, base_type, key_policy)
        return cls(base_type, index, namespace=namespace)

    @staticmethod
    def derive_key(instance: Any, descriptor: TypeDescriptor, namespace: str) -> Hashable:
        """Return the key for ``instance``. Subclasses must override."""
        raise NotImplementedError

    @property
    def base_type(self) -> Type[T]:
        return self._base_type

    @property
    def base_type_name(self) -> str:
        return qualified_type_name(self._base_type)

    @property
    def namespace(self) -> Optional[str]:
        return self._namespace

    def get(self, key: I) -> T:
        """Return the instance stored for ``key``.

        Raises:
            EntryNotFoundError: If ``key`` has no entry, unhashable keys included.
                Never returns ``None``.
        """
        try:
            return self._index[key]
        except (KeyError, TypeError):
            raise EntryNotFoundError(
                key,
                self.base_type_name,
                context={'namespace': self._namespace} if self._namespace else None,
            ) from None

    def stored_keys(self) -> AbstractSet[I]:
        """Return a read-only view of the stored keys."""
        return self._index.keys()

    def items(self) -> ItemsView[I, T]:
        return self._index.items()

    def __contains__(self, key: object) -> bool:
        try:
            return key in self._index
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[I]:
        return iter(self._index)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base_type={self.base_type_name}, "
            f"namespace={self._namespace!r}, entries={len(self)})"
        )


__all__ = ["KeyedRegistry"]
