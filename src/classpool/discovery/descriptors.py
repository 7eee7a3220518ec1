"""Type descriptors produced by discovery providers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class TypeDescriptor:
    """Identifies one candidate class before it is instantiated.

    ``qualified_name`` is package-qualified: a class ``Jump`` defined in
    ``pkg/actions/jump.py`` is described as ``pkg.actions.Jump`` with
    ``namespace == "pkg.actions"`` and ``module == "pkg.actions.jump"``.
    """

    qualified_name: str
    namespace: str
    target: type = field(repr=False)
    module: Optional[str] = None

    @classmethod
    def for_class(cls, target: type, namespace: str) -> "TypeDescriptor":
        """Describe ``target`` as living directly in ``namespace``."""
        return cls(
            qualified_name=f"{namespace}.{target.__name__}",
            namespace=namespace,
            target=target,
            module=getattr(target, "__module__", None),
        )

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]

    @property
    def factory(self) -> Callable[[], Any]:
        """Zero-argument callable producing an instance of the described type."""
        return self.target


__all__ = ["TypeDescriptor"]
