"""Convert a file from one format to another."""

from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger

from tabio.config import get_config
from tabio.core.exceptions import ExportError
from tabio.io.exporter import Exporter
from tabio.io.extensions import resolve_format
from tabio.io.importer import Importer
from tabio.io.registry import FormatRegistry, get_registry
from tabio.models.config import TabioConfig
from tabio.models.enums import Direction

PathLike = Union[str, Path]


def convert(
    in_file: PathLike,
    out_file: PathLike,
    in_format: Optional[str] = None,
    out_format: Optional[str] = None,
    *,
    in_options: Optional[dict[str, Any]] = None,
    out_options: Optional[dict[str, Any]] = None,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
) -> Union[Path, str]:
    """Import ``in_file`` and export it to ``out_file``.

    The output format is checked before anything is read, so an unwritable
    target fails fast. Nothing is written if the import fails.

    Args:
        in_file: Source path, URL or ``"clipboard"``
        out_file: Target path or ``"clipboard"``
        in_format: Explicit input format
        out_format: Explicit output format
        in_options: Options for the import handler
        out_options: Options for the export handler
        registry: Format registry (default: the shared registry)
        config: Configuration (default: the global configuration)

    Returns:
        Path of the written file, or ``"clipboard"``
    """
    registry = registry or get_registry()
    config = config or get_config()

    target = resolve_format(str(out_file), out_format, registry, config.compression_formats)
    if target.tag is None:
        raise ExportError(f"Cannot determine the format to write inside '{out_file}'. Pass out_format= explicitly.")
    registry.lookup(target.tag, Direction.EXPORT)

    logger.info(f"Converting '{in_file}' to '{out_file}'")
    df = Importer(registry, config).import_file(in_file, in_format, **(in_options or {}))
    return Exporter(registry, config).export_file(df, out_file, out_format, **(out_options or {}))


__all__ = ["convert"]
