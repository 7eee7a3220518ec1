"""Composition of independently built registries into one lookup surface."""
from __future__ import annotations

from typing import Any, FrozenSet, Iterator, List, Optional, Tuple, Type, TypeVar

from classpool import logger
from classpool.discovery import DiscoveryProvider
from classpool.exceptions import DuplicateKeyError, EntryNotFoundError

from .builder import KeyPolicy
from .keyed import KeyedRegistry

T = TypeVar("T")


class GroupedRegistry(KeyedRegistry[T, str]):
    """A registry made of member registries with pairwise disjoint keys.

    Members are kept in the order they were added rather than merged, and
    lookups probe them in that order. Keys are checked for collisions when a
    member is added; a colliding member is rejected and the group is left
    untouched.

    Adding members mutates the group. Finish composing before sharing the
    group between threads.

    Example:
        >>> group = GroupedRegistry(Action, actions, moves)
        >>> group.get("Jump")
    """

    def __init__(self, base_type: Type[T], *members: KeyedRegistry[T, str]) -> None:
        super().__init__(base_type)
        self._members: List[KeyedRegistry[T, str]] = []
        for member in members:
            self.add_member(member)

    @classmethod
    def from_namespace(
        cls,
        namespace: str,
        base_type: Type[T],
        *,
        provider: Optional[DiscoveryProvider] = None,
        key_policy: Optional[KeyPolicy] = None,
    ) -> "GroupedRegistry[T]":
        raise TypeError(
            "GroupedRegistry is composed from built registries; "
            "build members with StringKeyedRegistry.from_namespace and add them"
        )

    @property
    def members(self) -> Tuple[KeyedRegistry[T, str], ...]:
        return tuple(self._members)

    @property
    def namespaces(self) -> Tuple[Optional[str], ...]:
        return tuple(member.namespace for member in self._members)

    def add_member(self, member: KeyedRegistry[T, str]) -> None:
        """Append ``member`` after checking its keys against current members.

        Raises:
            TypeError: If ``member`` is not a registry of a compatible base type,
                or is itself a grouped registry whose keys could still change
            ValueError: If ``member`` is this group
            DuplicateKeyError: If any key is already present; nothing is added
        """
        if not isinstance(member, KeyedRegistry):
            raise TypeError(f"Expected a KeyedRegistry, got {type(member).__name__}")
        if member is self:
            raise ValueError("A grouped registry cannot contain itself")
        if isinstance(member, GroupedRegistry):
            raise TypeError(
                "Grouped registries cannot be nested; add their members instead"
            )
        if not issubclass(member.base_type, self.base_type):
            raise TypeError(
                f"Cannot add a registry of {member.base_type_name} to a grouped "
                f"registry of {self.base_type_name}"
            )

        collisions = self.stored_keys() & frozenset(member.stored_keys())
        if collisions:
            first = sorted(collisions, key=str)[0]
            raise DuplicateKeyError(
                first,
                frozenset(collisions),
                context={'base_type': self.base_type_name, 'namespace': member.namespace},
            )

        entries = len(member)
        source = member.namespace or type(member).__name__
        self._members.append(member)
        logger.info(
            "Added {} entries from {} to grouped {} registry ({} members)",
            entries,
            source,
            self.base_type_name,
            len(self._members),
        )

    def get(self, key: str) -> T:
        for member in self._members:
            if key in member:
                return member.get(key)

        raise EntryNotFoundError(
            key,
            self.base_type_name,
            context={'members': len(self._members)},
        )

    def stored_keys(self) -> FrozenSet[str]:
        """Return the union of member keys, recomputed on every call."""
        keys: set = set()
        for member in self._members:
            keys.update(member.stored_keys())
        return frozenset(keys)

    def items(self) -> Tuple[Tuple[str, Any], ...]:
        return tuple(
            (key, member.get(key))
            for member in self._members
            for key in member
        )

    def __contains__(self, key: object) -> bool:
        return any(key in member for member in self._members)

    def __len__(self) -> int:
        return sum(len(member) for member in self._members)

    def __iter__(self) -> Iterator[str]:
        for member in self._members:
            yield from member

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base_type={self.base_type_name}, "
            f"members={len(self._members)}, entries={len(self)})"
        )


__all__ = ["GroupedRegistry"]
