"""Format resolution, source handling and the import/export engines."""

from tabio.io.convert import convert
from tabio.io.exporter import Exporter, export_file, export_list
from tabio.io.extensions import get_ext, get_info, resolve_format
from tabio.io.importer import Importer, import_file, import_list
from tabio.io.metadata import characterize, factorize, get_column_metadata, set_column_metadata
from tabio.io.registry import FormatRegistry, create_registry, get_registry, register_format, reset_registry

__all__ = [
    "Exporter",
    "FormatRegistry",
    "Importer",
    "characterize",
    "convert",
    "create_registry",
    "export_file",
    "export_list",
    "factorize",
    "get_column_metadata",
    "get_ext",
    "get_info",
    "get_registry",
    "import_file",
    "import_list",
    "register_format",
    "reset_registry",
    "resolve_format",
    "set_column_metadata",
]
