"""tabio exception classes."""

from typing import Optional


class TabioError(Exception):
    """Base exception for all tabio errors."""
    pass


class ConfigError(TabioError):
    """Configuration related errors."""
    pass


class FormatError(TabioError):
    """File format resolution errors."""
    pass


class UnrecognizedFormatError(FormatError):
    """Extension or format tag that no handler and no known library maps to."""

    def __init__(self, fmt: Optional[str], message: Optional[str] = None):
        self.format = fmt
        super().__init__(message or f"Unrecognized file format: '{fmt}'")


class KnownButUnsupportedError(FormatError):
    """Format with a known external implementation that is not registered."""

    def __init__(self, fmt: str, suggestion: str):
        self.format = fmt
        self.suggestion = suggestion
        super().__init__(
            f"Format '{fmt}' is not supported by tabio. "
            f"Try {suggestion}, or register a handler with tabio.register_format()."
        )


class HandlerDirectionUnavailableError(FormatError):
    """Format is registered but has no handler for the requested direction."""

    def __init__(self, tag: str, direction: str):
        self.tag = tag
        self.direction = direction
        super().__init__(f"Format '{tag}' does not support {direction}")


class SourceResolutionError(TabioError):
    """Source could not be turned into a readable file (network, archive, missing path)."""
    pass


class ArchiveMemberError(SourceResolutionError):
    """Archive member is missing or ambiguous."""
    pass


class HandlerExecutionError(TabioError):
    """The underlying codec library failed while reading or writing."""

    def __init__(self, tag: str, source: str, error: BaseException):
        self.tag = tag
        self.source = source
        super().__init__(f"Failed to process '{source}' as {tag}: {error}")


class ExportError(TabioError):
    """Export operation related errors."""
    pass


class MissingDependencyError(TabioError):
    """A codec library required for a format is not installed."""

    def __init__(self, package: str, fmt: str):
        self.package = package
        self.format = fmt
        super().__init__(
            f"Format '{fmt}' requires the '{package}' package. "
            f"Install with: pip install {package} (or run tabio.install_formats())"
        )
