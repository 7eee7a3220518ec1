"""
Registry infrastructure for classpool.

A registry is built once from a namespace: a discovery provider enumerates
candidate classes, the :class:`RegistryBuilder` instantiates each eligible
implementation of the base type exactly once and indexes it under a key
derived by a key policy, and the result is frozen in a
:class:`KeyedRegistry`.

- :class:`StringKeyedRegistry` keys by class name relative to the namespace
- :class:`GroupedRegistry` composes registries and rejects key collisions
- :class:`RegistryHandle` defers a process-wide registry build to start-up
"""

from classpool.registries.builder import KeyPolicy, RegistryBuilder
from classpool.registries.keyed import KeyedRegistry
from classpool.registries.string import StringKeyedRegistry, derive_string_key
from classpool.registries.grouped import GroupedRegistry
from classpool.registries.handle import RegistryHandle


__all__ = [
    "KeyPolicy",
    "RegistryBuilder",
    "KeyedRegistry",
    "StringKeyedRegistry",
    "derive_string_key",
    "GroupedRegistry",
    "RegistryHandle",
]
