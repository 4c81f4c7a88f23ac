"""Core functionality for tabio."""

from .exceptions import (
    TabioError,
    ConfigError,
    FormatError,
    UnrecognizedFormatError,
    KnownButUnsupportedError,
    HandlerDirectionUnavailableError,
    SourceResolutionError,
    ArchiveMemberError,
    HandlerExecutionError,
    ExportError,
    MissingDependencyError,
)
from .logging import (
    logger,
    get_logger,
    configure_logging,
    reset_logging,
)

__all__ = [
    # Exceptions
    'TabioError',
    'ConfigError',
    'FormatError',
    'UnrecognizedFormatError',
    'KnownButUnsupportedError',
    'HandlerDirectionUnavailableError',
    'SourceResolutionError',
    'ArchiveMemberError',
    'HandlerExecutionError',
    'ExportError',
    'MissingDependencyError',
    # Logging
    'logger',
    'get_logger',
    'configure_logging',
    'reset_logging',
]
