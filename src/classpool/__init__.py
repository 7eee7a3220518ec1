"""
classpool - Discover implementations of a base type inside a package and index them.

Given a namespace (a Python package), classpool finds every class opted into
discovery with :func:`indexed` that implements a base type, instantiates each
exactly once, and exposes the instances through a read-only keyed registry.
Registries built from several namespaces can be composed into a
:class:`GroupedRegistry` that refuses key collisions.

This module also owns the Loguru logger configuration used across the
package, with test-configurable entry points for pytest isolation.
"""

__version__ = "0.1.0"

import os
import sys
import warnings
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from loguru import logger

from classpool.config import VALID_LOG_LEVELS, ClassPoolSettings, get_settings
from classpool.exceptions import LoggingConfigError


# --- Logger State ---

class LoggerState:
    """Tracks sinks added by classpool so they can be removed for test isolation."""

    def __init__(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids = []

    def is_initialized(self) -> bool:
        return self._initialized

    def is_test_mode(self) -> bool:
        return self._test_mode

    def mark_initialized(self, test_mode: bool = False):
        self._initialized = True
        self._test_mode = test_mode

    def add_sink_id(self, sink_id: int):
        self._sink_ids.append(sink_id)

    @property
    def sink_ids(self):
        return tuple(self._sink_ids)

    def reset(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids.clear()


_logger_state = LoggerState()


# --- Configuration Validation ---

def validate_log_level(level: str) -> str:
    """
    Validate a Loguru level name.

    Args:
        level: Log level string to validate

    Returns:
        Upper-cased level name

    Raises:
        LoggingConfigError: If the level is unknown
    """
    level_upper = level.upper()

    if level_upper not in VALID_LOG_LEVELS:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}",
            context={'level': level},
        )

    return level_upper


# --- Sink Configuration ---

def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr
) -> int:
    """
    Add a console sink.

    Args:
        level: Log level for console output
        format_template: Custom format template (uses default if None)
        colorize: Enable colored console output
        destination: Console destination (default: sys.stderr)

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    validated_level = validate_log_level(level)

    if format_template is None:
        format_template = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        )

    try:
        sink_id = logger.add(
            destination,
            level=validated_level,
            format=format_template,
            colorize=colorize
        )
    except (TypeError, ValueError) as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Add a rotating file sink.

    Args:
        log_file_path: Path to log file; parent directories are created
        level: Log level for file output
        rotation: Log rotation setting
        retention: Log retention setting
        format_template: Custom format template (uses default if None)
        encoding: File encoding

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    validated_level = validate_log_level(level)
    path = Path(log_file_path)

    if format_template is None:
        format_template = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} - {message}"
        )

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sink_id = logger.add(
            str(path),
            rotation=rotation,
            retention=retention,
            level=validated_level,
            format=format_template,
            encoding=encoding
        )
    except (OSError, TypeError, ValueError) as e:
        raise LoggingConfigError(
            f"Failed to configure file logging: {e}",
            context={'log_file_path': str(path)},
        ) from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def reset_logging():
    """Remove every Loguru sink and forget classpool's logger state."""
    logger.remove()
    _logger_state.reset()


def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
) -> Dict[str, int]:
    """
    Configure logging for a test run.

    Resets all sinks, then adds an uncolored console sink so output can be
    captured and asserted on.

    Args:
        console_level: Console log level for tests
        console_destination: Console destination (None uses sys.stderr)

    Returns:
        Dictionary mapping sink types to sink IDs
    """
    reset_logging()

    destination = console_destination if console_destination is not None else sys.stderr
    sink_ids = {
        'console': configure_console_logging(
            level=console_level,
            destination=destination,
            colorize=False,
        )
    }

    _logger_state.mark_initialized(test_mode=True)
    return sink_ids


def initialize_logging(settings: Optional[ClassPoolSettings] = None) -> Dict[str, int]:
    """
    Configure sinks from settings.

    Args:
        settings: Settings to apply (defaults to environment settings)

    Returns:
        Dictionary mapping sink types to sink IDs

    Raises:
        LoggingConfigError: If a sink cannot be configured
    """
    settings = settings or get_settings()

    logger.remove()
    _logger_state.reset()

    sink_ids = {}
    if settings.console_logging:
        sink_ids['console'] = configure_console_logging(level=settings.log_level)
    if settings.log_file is not None:
        sink_ids['file'] = configure_file_logging(settings.log_file)

    _logger_state.mark_initialized(test_mode=False)
    logger.debug("classpool logging initialized with sinks {}", sorted(sink_ids))
    return sink_ids


def get_logger_state() -> LoggerState:
    return _logger_state


def is_logging_initialized() -> bool:
    return _logger_state.is_initialized()


def is_test_mode() -> bool:
    return _logger_state.is_test_mode()


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging():
    """Configure logging from the environment unless already done or under pytest."""
    if _logger_state.is_initialized() or _is_pytest_running():
        return
    try:
        initialize_logging()
    except (LoggingConfigError, ValueError) as e:
        # Settings validation or sink setup failed; keep a plain stderr sink.
        warnings.warn(f"Failed to initialize classpool logging: {e}. Using basic stderr logging.")
        logger.remove()
        logger.add(sys.stderr, level="WARNING")
        _logger_state.mark_initialized(test_mode=False)


_auto_initialize_logging()


# --- Public API ---

from classpool.exceptions import (  # noqa: E402
    BuildError,
    ClassPoolError,
    DuplicateKeyError,
    EntryNotFoundError,
    ManifestError,
    RegistryNotInitializedError,
)
from classpool.discovery import (  # noqa: E402
    DiscoveryProvider,
    ManifestDiscoveryProvider,
    PackageDiscoveryProvider,
    StaticDiscoveryProvider,
    TypeDescriptor,
    indexed,
    is_indexed,
)
from classpool.registries import (  # noqa: E402
    GroupedRegistry,
    KeyedRegistry,
    RegistryBuilder,
    RegistryHandle,
    StringKeyedRegistry,
    derive_string_key,
)


__all__ = [
    "__version__",
    "logger",
    # logging
    "LoggerState",
    "validate_log_level",
    "configure_console_logging",
    "configure_file_logging",
    "configure_test_logging",
    "reset_logging",
    "initialize_logging",
    "get_logger_state",
    "is_logging_initialized",
    "is_test_mode",
    # errors
    "ClassPoolError",
    "BuildError",
    "EntryNotFoundError",
    "DuplicateKeyError",
    "ManifestError",
    "RegistryNotInitializedError",
    "LoggingConfigError",
    # discovery
    "DiscoveryProvider",
    "StaticDiscoveryProvider",
    "PackageDiscoveryProvider",
    "ManifestDiscoveryProvider",
    "TypeDescriptor",
    "indexed",
    "is_indexed",
    # registries
    "RegistryBuilder",
    "KeyedRegistry",
    "StringKeyedRegistry",
    "GroupedRegistry",
    "RegistryHandle",
    "derive_string_key",
]
