"""
Candidate discovery for classpool registries.

Discovery answers four questions for a registry builder: which candidate
types live under a namespace, whether each opted in, whether it implements
the registry's base type, and how to construct it. The
:class:`DiscoveryProvider` protocol captures them; three implementations
ship here:

- :class:`PackageDiscoveryProvider` imports a package and inspects its modules
- :class:`ManifestDiscoveryProvider` reads class references from a YAML manifest
- :class:`StaticDiscoveryProvider` serves a fixed in-memory mapping
"""

from classpool.discovery.descriptors import TypeDescriptor
from classpool.discovery.markers import INDEXED_MARKER, indexed, is_indexed
from classpool.discovery.providers import (
    ClassDiscoveryProvider,
    DiscoveryProvider,
    EligibilityPredicate,
    StaticDiscoveryProvider,
)
from classpool.discovery.package import PackageDiscoveryProvider
from classpool.discovery.manifest import DiscoveryManifest, ManifestDiscoveryProvider


__all__ = [
    "TypeDescriptor",
    "INDEXED_MARKER",
    "indexed",
    "is_indexed",
    "DiscoveryProvider",
    "ClassDiscoveryProvider",
    "EligibilityPredicate",
    "StaticDiscoveryProvider",
    "PackageDiscoveryProvider",
    "DiscoveryManifest",
    "ManifestDiscoveryProvider",
]
