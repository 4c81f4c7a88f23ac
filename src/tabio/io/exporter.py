"""Export engine: write DataFrames to any supported format."""

import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import pandas as pd
from loguru import logger

from tabio.config import get_config
from tabio.core.exceptions import ExportError, HandlerExecutionError, TabioError
from tabio.io.archives import compress_file, strip_suffix
from tabio.io.extensions import CLIPBOARD, resolve_format
from tabio.io.registry import FormatRegistry, get_registry
from tabio.models.config import TabioConfig
from tabio.models.enums import Direction

PathLike = Union[str, Path]

Tables = dict[str, pd.DataFrame]


def _is_table_collection(x: Any) -> bool:
    if isinstance(x, Mapping):
        return len(x) > 0 and all(isinstance(v, pd.DataFrame) for v in x.values())
    if isinstance(x, (list, tuple)):
        return len(x) > 0 and all(isinstance(v, pd.DataFrame) for v in x)
    return False


def _as_tables(x: Any) -> Tables:
    """Name the tables of a mapping or list (lists become Sheet1..n)."""
    if isinstance(x, Mapping):
        return {str(name): df for name, df in x.items()}
    return {f"Sheet{i}": df for i, df in enumerate(x, start=1)}


def _missing_dirs(directory: Path) -> list[Path]:
    """Directories that ``mkdir(parents=True)`` would create, deepest first."""
    missing = []
    while not directory.exists():
        missing.append(directory)
        if directory.parent == directory:
            break
        directory = directory.parent
    return missing


def _remove_dirs(directories: list[Path]) -> None:
    for directory in directories:
        try:
            directory.rmdir()
        except OSError as e:
            logger.debug(f"Leaving {directory} in place: {e}")
            break


def _as_frame(x: Any) -> pd.DataFrame:
    if isinstance(x, pd.DataFrame):
        return x
    try:
        return pd.DataFrame(x)
    except (TypeError, ValueError) as e:
        raise ExportError(f"Cannot export object of type {type(x).__name__} as a table: {e}") from e


class Exporter:
    """Write tables through the format registry."""

    def __init__(self, registry: Optional[FormatRegistry] = None, config: Optional[TabioConfig] = None):
        """Initialize exporter.

        Args:
            registry: Format registry (default: the shared registry)
            config: Configuration (default: the global configuration)
        """
        self.registry = registry or get_registry()
        self.config = config or get_config()

    def export_file(
        self,
        x: Any,
        file: PathLike,
        format: Optional[str] = None,
        **options: Any,
    ) -> Union[Path, str]:
        """Export a table, or several named tables to a multi-table format.

        Args:
            x: DataFrame, mapping/list of DataFrames, or anything
                ``pandas.DataFrame`` accepts
            file: Target path, or ``"clipboard"``
            format: Explicit format overriding the file extension
            **options: Passed to the format handler

        Returns:
            Path of the written file, or ``"clipboard"``

        Raises:
            ExportError: If several tables go to a single-table format
            HandlerDirectionUnavailableError: If the format cannot be written
        """
        target = str(file)
        resolved = resolve_format(target, format, self.registry, self.config.compression_formats)
        tag = resolved.tag
        if tag is None:
            raise ExportError(f"Cannot determine the format to write inside '{target}'. Pass format= explicitly.")

        handler = self.registry.lookup(tag, Direction.EXPORT)
        payload = self._prepare(x, tag)

        if tag == CLIPBOARD:
            logger.info("Exporting to clipboard")
            self._run(handler, payload, None, tag, target, **options)
            return CLIPBOARD

        path = Path(target).expanduser()
        created = _missing_dirs(path.parent)
        path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Exporting to '{path}' as {tag}")
        try:
            with tempfile.TemporaryDirectory(prefix=".tabio-", dir=path.parent) as tmp:
                tmp_dir = Path(tmp)
                if resolved.compression is None:
                    staged = tmp_dir / path.name
                    self._run(handler, payload, staged, tag, target, **options)
                else:
                    inner = tmp_dir / strip_suffix(path.name, resolved.compression)
                    self._run(handler, payload, inner, tag, target, **options)
                    staged = compress_file(inner, tmp_dir / path.name, resolved.compression)
                os.replace(staged, path)
        except BaseException:
            _remove_dirs(created)
            raise

        logger.debug(f"Wrote {path} ({path.stat().st_size} bytes)")
        return path

    def export_list(
        self,
        x: Union[Mapping[str, pd.DataFrame], Sequence[pd.DataFrame]],
        file: Union[str, Sequence[PathLike]] = "{name}.csv",
        format: Optional[str] = None,
        **options: Any,
    ) -> list[Path]:
        """Export each table to its own file.

        Args:
            x: Mapping of name to DataFrame, or a list of DataFrames
            file: Pattern using ``{name}`` and/or ``{index}``, or one file
                name per table
            format: Explicit format for every file
            **options: Passed to the format handler

        Returns:
            Written paths, in table order
        """
        if not _is_table_collection(x):
            raise ExportError("export_list expects a non-empty mapping or list of DataFrames")
        tables = _as_tables(x) if isinstance(x, Mapping) else {f"table{i}": df for i, df in enumerate(x, start=1)}

        if isinstance(file, (str, Path)):
            pattern = str(file)
            if "{name}" not in pattern and "{index}" not in pattern:
                raise ExportError(f"File pattern '{pattern}' must contain {{name}} or {{index}}")
            targets = [pattern.format(name=name, index=i) for i, name in enumerate(tables, start=1)]
        else:
            targets = [str(f) for f in file]
            if len(targets) != len(tables):
                raise ExportError(f"Got {len(targets)} file names for {len(tables)} tables")

        if len(set(targets)) != len(targets):
            raise ExportError(f"File names are not unique: {targets}")

        return [
            self.export_file(df, target, format, **options)
            for df, target in zip(tables.values(), targets)
        ]

    def _prepare(self, x: Any, tag: str) -> Union[pd.DataFrame, Tables]:
        """Shape the input the way the format's export handler takes it."""
        multi_table = self.registry.is_multi_table(tag)
        if _is_table_collection(x):
            if not multi_table:
                raise ExportError(
                    f"Format '{tag}' holds a single table; got {len(x)} tables. "
                    "Use a multi-table format (xlsx, ods, html) or export_list()."
                )
            return _as_tables(x)

        df = _as_frame(x)
        return {"Sheet1": df} if multi_table else df

    @staticmethod
    def _run(handler, payload, path: Optional[Path], tag: str, target: str, **options: Any) -> None:
        try:
            handler(payload, path, **options)
        except TabioError:
            raise
        except Exception as e:
            raise HandlerExecutionError(tag, target, e) from e


def export_file(
    x: Any,
    file: PathLike,
    format: Optional[str] = None,
    *,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
    **options: Any,
) -> Union[Path, str]:
    """Export a table to a file or the clipboard.

    See ``Exporter.export_file``.
    """
    exporter = Exporter(registry, config)
    return exporter.export_file(x, file, format, **options)


def export_list(
    x: Union[Mapping[str, pd.DataFrame], Sequence[pd.DataFrame]],
    file: Union[str, Sequence[PathLike]] = "{name}.csv",
    format: Optional[str] = None,
    *,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
    **options: Any,
) -> list[Path]:
    """Export each table to its own file.

    See ``Exporter.export_list``.
    """
    exporter = Exporter(registry, config)
    return exporter.export_list(x, file, format, **options)


__all__ = ["Exporter", "export_file", "export_list"]
