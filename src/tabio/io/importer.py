"""Import engine: read any supported source into a DataFrame."""

from pathlib import Path
from typing import Any, Iterable, Optional, Union

import pandas as pd
from loguru import logger

from tabio.config import get_config
from tabio.core.exceptions import HandlerExecutionError, SourceResolutionError, TabioError
from tabio.io.archives import is_archive, list_archive_members
from tabio.io.extensions import resolve_format
from tabio.io.metadata import ATTRS_KEY, complete_metadata
from tabio.io.registry import FormatRegistry, get_registry
from tabio.io.sources import is_url, locate_source, open_source
from tabio.models.config import TabioConfig
from tabio.models.enums import Direction

PathLike = Union[str, Path]


def _normalize(result: Any, tag: str, source: str) -> pd.DataFrame:
    """Coerce a handler result to a DataFrame with complete column metadata.

    Column names and values are left exactly as the handler produced them.
    """
    if isinstance(result, pd.DataFrame):
        df = result
    else:
        attrs = getattr(result, "attrs", {})
        df = pd.DataFrame(result)
        df.attrs.update(attrs)
    return complete_metadata(df, format=tag, source=source)


class Importer:
    """Read tables through the format registry."""

    def __init__(self, registry: Optional[FormatRegistry] = None, config: Optional[TabioConfig] = None):
        """Initialize importer.

        Args:
            registry: Format registry (default: the shared registry)
            config: Configuration (default: the global configuration)
        """
        self.registry = registry or get_registry()
        self.config = config or get_config()

    def import_file(
        self,
        file: PathLike,
        format: Optional[str] = None,
        member: Optional[str] = None,
        which: Union[int, str, None] = None,
        **options: Any,
    ) -> pd.DataFrame:
        """Import one table.

        Args:
            file: Local path, URL, Google Sheets link or ``"clipboard"``
            format: Explicit format overriding the file extension
            member: File to read inside a zip/tar archive
            which: Sheet (spreadsheets) or table (HTML) name or position
            **options: Passed to the format handler

        Returns:
            DataFrame with column metadata in ``attrs["tabio"]``
        """
        source = str(file)
        spec = locate_source(source, format, member, self.registry, self.config)

        with open_source(spec, self.registry, self.config) as (path, tag):
            handler = self.registry.lookup(tag, Direction.IMPORT)
            if which is not None:
                options["which"] = which

            logger.info(f"Importing '{source}' as {tag}")
            try:
                result = handler(path, **options)
            except TabioError:
                raise
            except Exception as e:
                raise HandlerExecutionError(tag, source, e) from e

        df = _normalize(result, tag, source)
        logger.debug(f"Imported {len(df)} rows x {len(df.columns)} columns from '{source}'")
        return df

    def import_list(
        self,
        file: PathLike,
        format: Optional[str] = None,
        which: Optional[Iterable[Union[int, str]]] = None,
        combine: bool = False,
        **options: Any,
    ) -> Union[dict[str, pd.DataFrame], pd.DataFrame]:
        """Import every sheet, table or archive member of a multi-section source.

        Args:
            file: Workbook, HTML document, or zip/tar archive with several members
            format: Explicit format of the file (or of the archive members)
            which: Names or positions to keep (default: all)
            combine: Concatenate into one DataFrame with a ``_source`` column
            **options: Passed to the format handler

        Returns:
            Mapping of section name to DataFrame, in file order
        """
        source = str(file)
        resolved = resolve_format(source, format, self.registry, self.config.compression_formats)

        if is_archive(resolved.compression) and not is_url(source):
            tables = self._import_archive_members(source, resolved.compression, format, **options)
        else:
            tables = self._import_sections(source, format, **options)

        if which is not None:
            tables = _select_sections(tables, list(which), source)

        if combine:
            frames = [df.assign(_source=name) for name, df in tables.items()]
            return pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
        return tables

    def _import_sections(self, source: str, format: Optional[str], **options: Any) -> dict[str, pd.DataFrame]:
        spec = locate_source(source, format, None, self.registry, self.config)
        with open_source(spec, self.registry, self.config) as (path, tag):
            pair = self.registry.get(tag)
            logger.info(f"Importing all sections of '{source}' as {tag}")
            try:
                if pair.import_all_fn is not None:
                    sections = pair.import_all_fn(path, **options)
                else:
                    # Single-section format: a one-entry mapping
                    handler = self.registry.lookup(tag, Direction.IMPORT)
                    sections = {Path(path).stem if path is not None else tag: handler(path, **options)}
            except TabioError:
                raise
            except Exception as e:
                raise HandlerExecutionError(tag, source, e) from e

        return {str(name): _normalize(df, tag, source) for name, df in sections.items()}

    def _import_archive_members(
        self,
        source: str,
        compression: str,
        format: Optional[str],
        **options: Any,
    ) -> dict[str, pd.DataFrame]:
        path = Path(source).expanduser()
        if not path.is_file():
            raise SourceResolutionError(f"File not found: {source}")

        tables = {}
        for member in list_archive_members(path, compression):
            tables[member] = self.import_file(source, format, member=member, **options)
        return tables


def _select_sections(tables: dict[str, pd.DataFrame], which: list[Union[int, str]], source: str) -> dict[str, pd.DataFrame]:
    names = list(tables)
    selected = {}
    for key in which:
        name = names[key] if isinstance(key, int) and key < len(names) else key
        if name not in tables:
            raise TabioError(f"No section {key!r} in '{source}'. Sections: {names}")
        selected[name] = tables[name]
    return selected


def import_file(
    file: PathLike,
    format: Optional[str] = None,
    *,
    member: Optional[str] = None,
    which: Union[int, str, None] = None,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
    **options: Any,
) -> pd.DataFrame:
    """Import a table from a file, URL or the clipboard.

    See ``Importer.import_file``.
    """
    importer = Importer(registry, config)
    return importer.import_file(file, format, member=member, which=which, **options)


def import_list(
    file: PathLike,
    format: Optional[str] = None,
    *,
    which: Optional[Iterable[Union[int, str]]] = None,
    combine: bool = False,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
    **options: Any,
) -> Union[dict[str, pd.DataFrame], pd.DataFrame]:
    """Import every section of a multi-section file.

    See ``Importer.import_list``.
    """
    importer = Importer(registry, config)
    return importer.import_list(file, format, which=which, combine=combine, **options)


__all__ = ["ATTRS_KEY", "Importer", "import_file", "import_list"]
