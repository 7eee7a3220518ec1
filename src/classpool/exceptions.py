"""
ClassPool Exception Hierarchy

This module provides the domain-specific exception hierarchy for classpool.
Every error carries an error code for programmatic handling and a context
dictionary naming the namespace, key or base type involved, so that a failed
start-up can be diagnosed from the message alone.

The exception hierarchy follows a clear domain-based structure:
- ClassPoolError: Base exception for all classpool-specific errors
- BuildError: Registry construction failures (always fatal)
- EntryNotFoundError: Lookup of an unregistered key
- DuplicateKeyError: Key collision while composing a grouped registry
- ManifestError: Static discovery manifest could not be loaded
- RegistryNotInitializedError: Registry handle read before initialization

Usage Examples:
    Lookup failures are also builtin ``LookupError`` instances:
    >>> try:
    ...     registry.get("Nonexistent")
    ... except LookupError as e:
    ...     logger.error(f"Unknown action: {e}")

    Error code checking:
    >>> try:
    ...     StringKeyedRegistry.from_namespace("pkg.actions", Action)
    ... except BuildError as e:
    ...     if e.error_code == "BUILD_002":
    ...         # Two actions derived the same key
    ...         raise
"""

from typing import Any, Dict, FrozenSet, Hashable, Optional


class ClassPoolError(Exception):
    """
    Base exception class for all classpool-specific errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        CLASSPOOL_001: Generic classpool error
        CLASSPOOL_002: Logging configuration failed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CLASSPOOL_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the ClassPoolError with message, error code, and context.

        Args:
            message: Human-readable error description
            error_code: Unique identifier for programmatic error handling
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context) if context else {}

    def with_context(self, context: Dict[str, Any]) -> 'ClassPoolError':
        """
        Add additional context to the exception and return self for chaining.

        Args:
            context: Dictionary of context information to add

        Returns:
            Self for method chaining

        Example:
            >>> raise BuildError("Build failed").with_context({
            ...     "namespace": "pkg.actions",
            ... })
        """
        self.context.update(context)
        return self

    @property
    def message(self) -> str:
        """The bare message without code and context."""
        return super().__str__()

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class BuildError(ClassPoolError):
    """
    Registry construction errors.

    Raised by the registry builder when any part of a build fails. A build
    either produces a complete registry or raises this error; partial
    registries are never returned.

    Error Codes:
        BUILD_001: Candidate construction failed
        BUILD_002: Duplicate key within a single namespace
        BUILD_003: Namespace could not be enumerated
        BUILD_004: Key derivation failed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "BUILD_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'base_type' in context and isinstance(context['base_type'], type):
                self.context['base_type'] = qualified_type_name(context['base_type'])

    @property
    def namespace(self) -> Optional[str]:
        return self.context.get('namespace')


class EntryNotFoundError(ClassPoolError, LookupError):
    """
    Raised when a registry has no entry for a key.

    Registries never hand back ``None`` for a missing key; asking for an
    unregistered capability is treated as a programming error.

    Error Codes:
        LOOKUP_001: No entry for key
    """

    def __init__(
        self,
        key: Hashable,
        base_type_name: str,
        error_code: str = "LOOKUP_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.key = key
        self.base_type_name = base_type_name
        merged = {'key': key, 'base_type': base_type_name}
        if context:
            merged.update(context)
        super().__init__(
            f"No entry found for key {key!r} for base type {base_type_name}",
            error_code,
            merged,
        )


class DuplicateKeyError(ClassPoolError):
    """
    Raised when a grouped registry member shares keys with existing members.

    The offending member is not added; the grouped registry is left exactly
    as it was before the call.

    Error Codes:
        GROUP_001: Member keys collide with already composed members
    """

    def __init__(
        self,
        key: Hashable,
        duplicates: FrozenSet[Hashable] = frozenset(),
        error_code: str = "GROUP_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.key = key
        self.duplicates = frozenset(duplicates) or frozenset([key])
        merged: Dict[str, Any] = {'key': key}
        if len(self.duplicates) > 1:
            merged['duplicates'] = sorted(self.duplicates, key=str)
        if context:
            merged.update(context)
        super().__init__(
            f"Attempted to add two entries with the same identifier ({key!r}) "
            f"to a grouped registry",
            error_code,
            merged,
        )


class ManifestError(ClassPoolError):
    """
    Static discovery manifest errors.

    Error Codes:
        MANIFEST_001: Manifest file not found or unreadable
        MANIFEST_002: Manifest is not valid YAML
        MANIFEST_003: Manifest failed schema validation
        MANIFEST_004: Manifest entry could not be resolved to a class
    """

    def __init__(
        self,
        message: str,
        error_code: str = "MANIFEST_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context and 'manifest_path' in context:
            self.context['manifest_path'] = str(context['manifest_path'])


class RegistryNotInitializedError(ClassPoolError):
    """
    Raised when a registry handle is read before ``initialize()`` ran.

    Error Codes:
        HANDLE_001: Registry handle not initialized
    """

    def __init__(
        self,
        message: str,
        error_code: str = "HANDLE_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


class LoggingConfigError(ClassPoolError):
    """Raised when logging configuration fails validation or setup."""

    def __init__(
        self,
        message: str,
        error_code: str = "CLASSPOOL_002",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


def qualified_type_name(type_: type) -> str:
    """Return ``module.QualName`` for a class, omitting the builtins module."""
    module = getattr(type_, '__module__', None)
    qualname = getattr(type_, '__qualname__', type_.__name__)
    if module in (None, 'builtins'):
        return qualname
    return f"{module}.{qualname}"


__all__ = [
    "ClassPoolError",
    "BuildError",
    "EntryNotFoundError",
    "DuplicateKeyError",
    "ManifestError",
    "RegistryNotInitializedError",
    "LoggingConfigError",
    "qualified_type_name",
]
