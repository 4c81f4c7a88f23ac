"""Spreadsheet workbooks: xlsx, xls, ods."""

from pathlib import Path
from typing import Any, Union

import pandas as pd
from loguru import logger

from tabio.core.exceptions import ExportError
from tabio.dependencies import require

# Format tag -> (pandas engine, import name of the engine)
ENGINES = {
    "xlsx": ("openpyxl", "openpyxl"),
    "xls": ("xlrd", "xlrd"),
    "ods": ("odf", "odf"),
}

MAX_SHEET_NAME = 31


def _engine(tag: str) -> str:
    engine, module = ENGINES[tag]
    require(module, tag)
    return engine


def import_sheet(
    path: Path,
    tag: str = "xlsx",
    which: Union[int, str, None] = None,
    **options: Any,
) -> pd.DataFrame:
    """Read one sheet of a workbook; ``which`` is a sheet name or position."""
    options.setdefault("sheet_name", 0 if which is None else which)
    df = pd.read_excel(path, engine=_engine(tag), **options)
    logger.info(f"Loaded {tag} sheet {options['sheet_name']!r} with {len(df)} rows from {path.name}")
    return df


def import_workbook(path: Path, tag: str = "xlsx", **options: Any) -> dict[str, pd.DataFrame]:
    """Read every sheet of a workbook, in workbook order."""
    options["sheet_name"] = None
    return pd.read_excel(path, engine=_engine(tag), **options)


def export_workbook(tables: dict[str, pd.DataFrame], path: Path, tag: str = "xlsx", **options: Any) -> None:
    """Write each table to its own sheet, in mapping order."""
    sheet_names = [str(name)[:MAX_SHEET_NAME] for name in tables]
    if len(set(sheet_names)) != len(sheet_names):
        raise ExportError(f"Sheet names must be unique within {MAX_SHEET_NAME} characters: {sheet_names}")

    options.setdefault("index", False)
    with pd.ExcelWriter(path, engine=_engine(tag)) as writer:
        for sheet_name, df in zip(sheet_names, tables.values()):
            df.to_excel(writer, sheet_name=sheet_name, **options)
