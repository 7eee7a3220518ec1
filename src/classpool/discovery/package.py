"""Discovery by importing a package and introspecting its modules."""
from __future__ import annotations

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Iterator, Optional, Set

from classpool import logger
from classpool.config import get_settings

from .descriptors import TypeDescriptor
from .providers import ClassDiscoveryProvider, EligibilityPredicate


class PackageDiscoveryProvider(ClassDiscoveryProvider):
    """Enumerate classes defined in a package and its sub-packages.

    Modules are visited depth-first in name order, so enumeration is
    reproducible. Only classes whose ``__module__`` is the module being
    visited are described; names imported from elsewhere are skipped, which
    keeps each class from being described twice.

    Importing the namespace runs module-level code; import errors propagate
    to the caller unchanged.
    """

    def __init__(
        self,
        predicate: Optional[EligibilityPredicate] = None,
        *,
        recursive: Optional[bool] = None,
        include_private: Optional[bool] = None,
    ) -> None:
        super().__init__(predicate)
        settings = get_settings()
        self.recursive = settings.recursive if recursive is None else recursive
        self.include_private = (
            settings.include_private_modules if include_private is None else include_private
        )
        logger.debug(
            "Initialized PackageDiscoveryProvider with recursive={}, include_private={}",
            self.recursive,
            self.include_private,
        )

    def enumerate(self, namespace: str) -> Iterator[TypeDescriptor]:
        package = importlib.import_module(namespace)
        if not hasattr(package, "__path__"):
            raise ImportError(f"{namespace!r} is a module, not a package", name=namespace)

        logger.debug("Scanning package {}", namespace)
        seen: Set[type] = set()
        for descriptor in self._walk(package):
            if descriptor.target in seen:
                continue
            seen.add(descriptor.target)
            yield descriptor

    def _walk(self, package: ModuleType) -> Iterator[TypeDescriptor]:
        yield from self._describe_module(package)

        modules = sorted(pkgutil.iter_modules(package.__path__), key=lambda info: info.name)
        for info in modules:
            if info.name == "__main__":
                continue
            if info.name.startswith("_") and not self.include_private:
                logger.debug("Skipping private module {}.{}", package.__name__, info.name)
                continue

            module = importlib.import_module(f"{package.__name__}.{info.name}")
            if info.ispkg:
                if self.recursive:
                    yield from self._walk(module)
            else:
                yield from self._describe_module(module)

    @staticmethod
    def _describe_module(module: ModuleType) -> Iterator[TypeDescriptor]:
        if hasattr(module, "__path__"):
            namespace = module.__name__
        else:
            namespace = module.__name__.rpartition(".")[0]

        for name, obj in inspect.getmembers(module, inspect.isclass):
            # Aliases and re-exports belong to another binding
            if obj.__module__ != module.__name__ or name != obj.__name__:
                continue
            yield TypeDescriptor(
                qualified_name=f"{namespace}.{name}",
                namespace=namespace,
                target=obj,
                module=module.__name__,
            )


__all__ = ["PackageDiscoveryProvider"]
