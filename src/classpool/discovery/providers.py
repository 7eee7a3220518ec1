"""Provider interfaces and implementations for discovery components."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from classpool import logger

from .descriptors import TypeDescriptor
from .markers import is_indexed

EligibilityPredicate = Callable[[type], bool]


@runtime_checkable
class DiscoveryProvider(Protocol):
    """Protocol for candidate enumeration and construction.

    Registry builders only talk to discovery through this interface, so any
    enumeration strategy (module scanning, a manifest, an in-memory list)
    can back a registry.
    """

    def enumerate(self, namespace: str) -> Iterable[TypeDescriptor]:
        """Yield descriptors under ``namespace``, sub-namespaces included, in a stable order."""

    def is_eligible(self, descriptor: TypeDescriptor) -> bool:
        """Return True when the described type opted into discovery."""

    def is_subtype_of(self, descriptor: TypeDescriptor, base_type: type) -> bool:
        """Return True when the described type implements ``base_type``."""

    def construct(self, descriptor: TypeDescriptor) -> Any:
        """Instantiate the described type with no arguments."""


class ClassDiscoveryProvider(ABC):
    """Shared eligibility, subtype and construction behaviour for class-based providers."""

    def __init__(self, predicate: Optional[EligibilityPredicate] = None) -> None:
        self.predicate = predicate or is_indexed

    @abstractmethod
    def enumerate(self, namespace: str) -> Iterable[TypeDescriptor]:
        """Yield descriptors under ``namespace`` in a stable order."""

    def is_eligible(self, descriptor: TypeDescriptor) -> bool:
        return bool(self.predicate(descriptor.target))

    def is_subtype_of(self, descriptor: TypeDescriptor, base_type: type) -> bool:
        target = descriptor.target
        return isinstance(target, type) and issubclass(target, base_type)

    def construct(self, descriptor: TypeDescriptor) -> Any:
        logger.debug("Constructing {}", descriptor.qualified_name)
        return descriptor.factory()


class StaticDiscoveryProvider(ClassDiscoveryProvider):
    """In-memory provider over a fixed namespace -> classes mapping.

    Example:
        >>> provider = StaticDiscoveryProvider({
        ...     "pkg.actions": [Jump, Run],
        ...     "pkg.actions.air": [Glide],
        ... })
        >>> [d.qualified_name for d in provider.enumerate("pkg.actions")]
        ['pkg.actions.Jump', 'pkg.actions.Run', 'pkg.actions.air.Glide']
    """

    def __init__(
        self,
        candidates: Mapping[str, Sequence[Union[type, TypeDescriptor]]],
        predicate: Optional[EligibilityPredicate] = None,
    ) -> None:
        super().__init__(predicate)
        self._candidates = {
            namespace: tuple(self._describe(namespace, entries))
            for namespace, entries in candidates.items()
        }

    @staticmethod
    def _describe(
        namespace: str, entries: Sequence[Union[type, TypeDescriptor]]
    ) -> Iterator[TypeDescriptor]:
        for entry in entries:
            if isinstance(entry, TypeDescriptor):
                yield entry
            else:
                yield TypeDescriptor.for_class(entry, namespace)

    @property
    def namespaces(self) -> List[str]:
        return sorted(self._candidates)

    def enumerate(self, namespace: str) -> Iterator[TypeDescriptor]:
        matched = [
            name for name in self.namespaces
            if name == namespace or name.startswith(namespace + ".")
        ]
        if not matched:
            raise LookupError(f"Namespace {namespace!r} is not known to this provider")

        for name in matched:
            yield from self._candidates[name]


__all__ = [
    "DiscoveryProvider",
    "ClassDiscoveryProvider",
    "StaticDiscoveryProvider",
    "EligibilityPredicate",
]
