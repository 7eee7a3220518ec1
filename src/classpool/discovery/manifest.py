"""
Discovery from a static YAML manifest.

A manifest lists, per namespace, the classes to index as ``module:Class``
references, so a host can pin its registries without importing whole
packages::

    namespaces:
      pkg.actions:
        - pkg.actions.jump:Jump
        - pkg.actions.air.glide:Glide
    require_marker: false

Listing a class is its opt-in. With ``require_marker: true`` the class must
also carry the :func:`~classpool.discovery.markers.indexed` mark.
"""
from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from classpool import logger
from classpool.exceptions import ManifestError

from .descriptors import TypeDescriptor
from .markers import is_indexed
from .providers import ClassDiscoveryProvider


class DiscoveryManifest(BaseModel):
    """Validated manifest contents."""

    namespaces: Dict[str, List[str]] = Field(default_factory=dict)
    require_marker: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("namespaces")
    @classmethod
    def validate_references(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for namespace, references in v.items():
            if not namespace or namespace.startswith(".") or namespace.endswith("."):
                raise ValueError(f"Invalid namespace name {namespace!r}")
            for reference in references:
                module, sep, attribute = reference.partition(":")
                if not sep or not module or not attribute:
                    raise ValueError(
                        f"Entry {reference!r} in {namespace!r} must look like 'module:ClassName'"
                    )
        return v


class ManifestDiscoveryProvider(ClassDiscoveryProvider):
    """Enumerate classes listed in a :class:`DiscoveryManifest`.

    References are imported lazily, during :meth:`enumerate`.
    """

    def __init__(self, manifest: DiscoveryManifest) -> None:
        super().__init__(is_indexed if manifest.require_marker else _always_eligible)
        self.manifest = manifest

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ManifestDiscoveryProvider":
        try:
            manifest = DiscoveryManifest.model_validate(dict(data))
        except ValidationError as e:
            raise ManifestError(
                f"Manifest failed validation: {e}",
                error_code="MANIFEST_003",
                context={'validation_errors': e.error_count()},
            ) from e
        return cls(manifest)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ManifestDiscoveryProvider":
        manifest_path = Path(path)
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(
                f"Cannot read manifest: {e}",
                error_code="MANIFEST_001",
                context={'manifest_path': manifest_path},
            ) from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ManifestError(
                f"Manifest is not valid YAML: {e}",
                error_code="MANIFEST_002",
                context={'manifest_path': manifest_path},
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ManifestError(
                f"Manifest root must be a mapping, got {type(data).__name__}",
                error_code="MANIFEST_003",
                context={'manifest_path': manifest_path},
            )

        logger.debug("Loaded discovery manifest from {}", manifest_path)
        try:
            return cls.from_mapping(data)
        except ManifestError as e:
            raise e.with_context({'manifest_path': str(manifest_path)})

    def enumerate(self, namespace: str) -> Iterator[TypeDescriptor]:
        matched = sorted(
            name for name in self.manifest.namespaces
            if name == namespace or name.startswith(namespace + ".")
        )
        if not matched:
            raise ManifestError(
                f"Namespace {namespace!r} is not listed in the manifest",
                error_code="MANIFEST_004",
                context={'namespace': namespace},
            )

        for name in matched:
            for reference in self.manifest.namespaces[name]:
                yield self._resolve(name, reference)

    @staticmethod
    def _resolve(namespace: str, reference: str) -> TypeDescriptor:
        module_name, _, attribute = reference.partition(":")
        try:
            module = importlib.import_module(module_name)
            target = getattr(module, attribute)
        except (ImportError, AttributeError) as e:
            raise ManifestError(
                f"Cannot resolve manifest entry {reference!r}: {e}",
                error_code="MANIFEST_004",
                context={'namespace': namespace, 'entry': reference},
            ) from e

        if not isinstance(target, type):
            raise ManifestError(
                f"Manifest entry {reference!r} is not a class",
                error_code="MANIFEST_004",
                context={'namespace': namespace, 'entry': reference},
            )

        package = module_name if hasattr(module, "__path__") else module_name.rpartition(".")[0]
        if package != namespace and not package.startswith(namespace + "."):
            raise ManifestError(
                f"Manifest entry {reference!r} lies outside namespace {namespace!r}",
                error_code="MANIFEST_004",
                context={'namespace': namespace, 'entry': reference},
            )

        return TypeDescriptor(
            qualified_name=f"{package}.{attribute}",
            namespace=package,
            target=target,
            module=module_name,
        )


def _always_eligible(_: type) -> bool:
    return True


__all__ = ["DiscoveryManifest", "ManifestDiscoveryProvider"]
