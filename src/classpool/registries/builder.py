"""Registry construction: discover, filter, instantiate, and index candidates."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Dict, Hashable, Mapping, Optional

from classpool import logger
from classpool.discovery import DiscoveryProvider, PackageDiscoveryProvider, TypeDescriptor
from classpool.exceptions import BuildError, qualified_type_name

KeyPolicy = Callable[[Any, TypeDescriptor, str], Hashable]


class RegistryBuilder:
    """Drive a discovery provider to produce an immutable keyed index.

    A build is all or nothing. Any enumeration failure, construction failure,
    key derivation failure or in-namespace key collision raises
    :class:`~classpool.exceptions.BuildError` and no index is returned.

    Example:
        >>> builder = RegistryBuilder(StaticDiscoveryProvider({"pkg.actions": [Jump]}))
        >>> index = builder.build("pkg.actions", Action, derive_string_key)
        >>> sorted(index)
        ['Jump']
    """

    def __init__(self, provider: Optional[DiscoveryProvider] = None) -> None:
        self.provider = provider if provider is not None else PackageDiscoveryProvider()

    def build(self, namespace: str, base_type: type, key_policy: KeyPolicy) -> Mapping[Hashable, Any]:
        """Build the index for ``base_type`` implementations under ``namespace``.

        Args:
            namespace: Dotted namespace to enumerate
            base_type: Type every indexed instance must implement
            key_policy: ``(instance, descriptor, namespace) -> key``

        Returns:
            Read-only mapping from key to the single instance built for it

        Raises:
            BuildError: BUILD_001 construction failed, BUILD_002 duplicate key,
                BUILD_003 enumeration failed, BUILD_004 key derivation failed
        """
        context = {'namespace': namespace, 'base_type': base_type}
        base_name = qualified_type_name(base_type)

        try:
            descriptors = list(self.provider.enumerate(namespace))
        except Exception as e:
            raise BuildError(
                f"Fatal error while indexing {namespace}: namespace could not be enumerated",
                error_code="BUILD_003",
                context=context,
            ) from e

        logger.debug("Enumerated {} candidates under {}", len(descriptors), namespace)

        index: Dict[Hashable, Any] = {}
        origins: Dict[Hashable, str] = {}

        for descriptor in descriptors:
            name = descriptor.qualified_name
            try:
                if not self.provider.is_eligible(descriptor):
                    logger.debug("Skipping {}: not marked for discovery", name)
                    continue
                if not self.provider.is_subtype_of(descriptor, base_type):
                    logger.debug("Skipping {}: not a subtype of {}", name, base_name)
                    continue
            except Exception as e:
                raise BuildError(
                    f"Fatal error while indexing {namespace}: could not inspect {name}",
                    error_code="BUILD_003",
                    context={**context, 'qualified_name': name},
                ) from e

            try:
                instance = self.provider.construct(descriptor)
            except Exception as e:
                raise BuildError(
                    f"Fatal error while indexing {namespace}: could not construct {name}",
                    error_code="BUILD_001",
                    context={**context, 'qualified_name': name},
                ) from e

            if not isinstance(instance, base_type):
                raise BuildError(
                    f"Fatal error while indexing {namespace}: constructing {name} "
                    f"produced {type(instance).__name__}, not a {base_name}",
                    error_code="BUILD_001",
                    context={**context, 'qualified_name': name},
                )

            try:
                key = key_policy(instance, descriptor, namespace)
                hash(key)
            except Exception as e:
                raise BuildError(
                    f"Fatal error while indexing {namespace}: could not derive a key for {name}",
                    error_code="BUILD_004",
                    context={**context, 'qualified_name': name},
                ) from e

            if key in index:
                raise BuildError(
                    f"Fatal error while indexing {namespace}: {name} and "
                    f"{origins[key]} both map to key {key!r}",
                    error_code="BUILD_002",
                    context={**context, 'key': key, 'qualified_name': name,
                             'conflicts_with': origins[key]},
                )

            index[key] = instance
            origins[key] = name
            logger.debug("Indexed {} as {!r}", name, key)

        logger.info(
            "Indexed {} {} implementations from {}",
            len(index),
            base_name,
            namespace,
        )
        return MappingProxyType(index)


__all__ = ["KeyPolicy", "RegistryBuilder"]
