"""
tabio - tabular data I/O

Import, export and convert tables between file formats, picking the
reader or writer from the file extension.
"""

from loguru import logger

# Library code stays silent until configure_logging() is called
logger.disable("tabio")

try:
    from importlib.metadata import version, PackageNotFoundError
    __version__ = version("tabio")
except PackageNotFoundError:
    # Package is not installed, use development version
    __version__ = "0.0.0+dev"

# Lazy imports - pandas and the engines load on first use

_IO_EXPORTS = {
    "import_file": "tabio.io.importer",
    "import_list": "tabio.io.importer",
    "export_file": "tabio.io.exporter",
    "export_list": "tabio.io.exporter",
    "convert": "tabio.io.convert",
    "get_info": "tabio.io.extensions",
    "get_ext": "tabio.io.extensions",
    "register_format": "tabio.io.registry",
    "get_registry": "tabio.io.registry",
    "FormatRegistry": "tabio.io.registry",
    "characterize": "tabio.io.metadata",
    "factorize": "tabio.io.metadata",
    "get_column_metadata": "tabio.io.metadata",
    "set_column_metadata": "tabio.io.metadata",
    "install_formats": "tabio.dependencies",
    "missing_formats": "tabio.dependencies",
    "configure_logging": "tabio.core.logging",
    "get_config": "tabio.config",
}

_EXCEPTIONS = (
    "TabioError",
    "ConfigError",
    "FormatError",
    "UnrecognizedFormatError",
    "KnownButUnsupportedError",
    "HandlerDirectionUnavailableError",
    "SourceResolutionError",
    "ArchiveMemberError",
    "HandlerExecutionError",
    "ExportError",
    "MissingDependencyError",
)


def __getattr__(name):
    """Lazy import mechanism for the public API."""
    import importlib

    if name in _IO_EXPORTS:
        module = importlib.import_module(_IO_EXPORTS[name])
        return getattr(module, name)

    # Exceptions are lightweight
    if name in _EXCEPTIONS:
        from tabio.core import exceptions
        return getattr(exceptions, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [*_IO_EXPORTS, *_EXCEPTIONS, "__version__"]
