"""Text markup formats: json, jsonl, yaml, html, xml."""

import html
import json
import re
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import yaml

from tabio.core.exceptions import TabioError
from tabio.dependencies import require


def import_json(path: Path, **options: Any) -> pd.DataFrame:
    """Read a JSON array of records (or any orient pandas understands)."""
    return pd.read_json(path, **options)


def export_json(df: pd.DataFrame, path: Path, **options: Any) -> None:
    """Write a JSON array of records."""
    options.setdefault("orient", "records")
    options.setdefault("date_format", "iso")
    options.setdefault("force_ascii", False)
    df.to_json(path, **options)


def import_jsonl(path: Path, **options: Any) -> pd.DataFrame:
    """Read newline-delimited JSON records."""
    options["lines"] = True
    return pd.read_json(path, **options)


def export_jsonl(df: pd.DataFrame, path: Path, **options: Any) -> None:
    """Write newline-delimited JSON records."""
    options.update(orient="records", lines=True)
    options.setdefault("date_format", "iso")
    options.setdefault("force_ascii", False)
    df.to_json(path, **options)


def import_yaml(path: Path, encoding: str = "utf-8") -> pd.DataFrame:
    """Read YAML holding either a list of records or a mapping of columns."""
    with open(path, encoding=encoding) as f:
        data = yaml.safe_load(f)

    if data is None:
        return pd.DataFrame()
    if isinstance(data, list):
        return pd.DataFrame.from_records(data)
    if isinstance(data, dict):
        return pd.DataFrame(data)
    raise TabioError(f"YAML document in '{path.name}' is not a table (got {type(data).__name__})")


def export_yaml(df: pd.DataFrame, path: Path, encoding: str = "utf-8") -> None:
    """Write YAML as a mapping of column name to values."""
    # Round-trip through JSON to get plain Python scalars and ISO dates
    split = json.loads(df.to_json(orient="split", index=False, date_format="iso"))
    columns = {
        str(name): [row[i] for row in split["data"]]
        for i, name in enumerate(split["columns"])
    }
    with open(path, "w", encoding=encoding) as f:
        yaml.safe_dump(columns, f, sort_keys=False, allow_unicode=True)


def _table_names(path: Path) -> list[Optional[str]]:
    lxml_html = require("lxml.html", "html")
    tree = lxml_html.parse(str(path))
    names = []
    for table in tree.iter("table"):
        caption = table.find("caption")
        text = caption.text_content().strip() if caption is not None else ""
        names.append(text or table.get("id"))
    return names


def import_html(path: Path, which: Union[int, str, None] = None, **options: Any) -> pd.DataFrame:
    """Read one table from an HTML document.

    ``which`` is the table position (default 0) or its caption/id.
    """
    tables = import_html_all(path, **options)
    if not tables:
        raise TabioError(f"No tables found in '{path.name}'")

    names = list(tables)
    if which is None:
        return tables[names[0]]
    if isinstance(which, int):
        if which >= len(names):
            raise TabioError(f"'{path.name}' has {len(names)} tables, no table {which}")
        return tables[names[which]]
    if which not in tables:
        raise TabioError(f"No table named '{which}' in '{path.name}'. Tables: {names}")
    return tables[which]


def import_html_all(path: Path, **options: Any) -> dict[str, pd.DataFrame]:
    """Read every table of an HTML document, keyed by caption or id."""
    require("lxml", "html")
    options.setdefault("flavor", "lxml")
    try:
        frames = pd.read_html(path, **options)
    except ValueError as e:
        # pandas raises ValueError when the document has no tables
        if "No tables found" in str(e):
            return {}
        raise

    names = _table_names(path)
    tables = {}
    for i, frame in enumerate(frames):
        name = names[i] if i < len(names) and names[i] else f"Table{i + 1}"
        tables[name] = frame
    return tables


def export_html(tables: dict[str, pd.DataFrame], path: Path, encoding: str = "utf-8", **options: Any) -> None:
    """Write tables into one HTML document, one captioned ``<table>`` each."""
    options.setdefault("index", False)
    options.setdefault("border", 1)

    parts = []
    for name, df in tables.items():
        table_html = df.to_html(**options)
        caption = html.escape(str(name))
        table_html = re.sub(
            r"^<table([^>]*)>",
            lambda m: f'<table{m.group(1)} id="{caption}">\n  <caption>{caption}</caption>',
            table_html,
            count=1,
        )
        parts.append(table_html)

    document = (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n</head>\n<body>\n"
        + "\n".join(parts)
        + "\n</body>\n</html>\n"
    )
    with open(path, "w", encoding=encoding) as f:
        f.write(document)


def import_xml(path: Path, **options: Any) -> pd.DataFrame:
    """Read a flat XML document of repeated row elements."""
    require("lxml", "xml")
    return pd.read_xml(path, **options)


def export_xml(df: pd.DataFrame, path: Path, **options: Any) -> None:
    """Write rows as ``<row>`` elements under ``<data>``."""
    require("lxml", "xml")
    options.setdefault("index", False)
    df.to_xml(path, **options)
