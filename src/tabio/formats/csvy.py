"""CSVY: CSV with a YAML front matter block describing the columns.

The front matter follows the CSVY convention of a ``fields`` list::

    ---
    name: survey
    fields:
    - name: sex
      type: integer
      title: Sex of respondent
      labels: {1: male, 2: female}
    ---
    sex,age
    1,34
"""

import io
from pathlib import Path
from typing import Any

import pandas as pd
import yaml
from pandas.api.types import (
    is_bool_dtype,
    is_datetime64_any_dtype,
    is_float_dtype,
    is_integer_dtype,
)

from tabio.core.exceptions import TabioError
from tabio.io.metadata import attach_metadata, get_column_metadata
from tabio.models.table import ColumnMetadata

FRONT_MATTER = "---"


def _field_type(series: pd.Series) -> str:
    if is_bool_dtype(series):
        return "boolean"
    if is_integer_dtype(series):
        return "integer"
    if is_float_dtype(series):
        return "number"
    if is_datetime64_any_dtype(series):
        return "datetime"
    return "string"


def _plain(value: Any) -> Any:
    """Numpy scalars to Python scalars, so yaml.safe_dump accepts them."""
    return value.item() if hasattr(value, "item") else value


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split CSVY text into its YAML header and CSV body."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER:
        return {}, text

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER:
            header = yaml.safe_load("".join(lines[1:end])) or {}
            if not isinstance(header, dict):
                raise TabioError("CSVY front matter must be a YAML mapping")
            return header, "".join(lines[end + 1:])
    raise TabioError("CSVY front matter is not closed by '---'")


def import_csvy(path: Path, encoding: str = "utf-8", **options: Any) -> pd.DataFrame:
    """Read a CSVY file, attaching labels from the front matter."""
    with open(path, encoding=encoding) as f:
        header, body = split_front_matter(f.read())

    fields = header.get("fields") or []
    dtypes = {f["name"]: str for f in fields if f.get("type") == "string"}
    if dtypes:
        options.setdefault("dtype", dtypes)

    df = pd.read_csv(io.StringIO(body), **options)

    columns = {}
    for field in fields:
        columns[field["name"]] = ColumnMetadata(
            label=field.get("title") or field.get("label"),
            value_labels=field.get("labels") or {},
            storage_type=field.get("type"),
            display_format=field.get("format"),
        )
    return attach_metadata(
        df,
        columns,
        name=header.get("name"),
        description=header.get("description"),
    )


def export_csvy(df: pd.DataFrame, path: Path, encoding: str = "utf-8", **options: Any) -> None:
    """Write a CSVY file with column types and labels in the front matter."""
    metadata = get_column_metadata(df)

    fields = []
    for name in df.columns:
        field: dict[str, Any] = {"name": str(name), "type": _field_type(df[name])}
        meta = metadata.get(name)
        if meta is not None:
            if meta.label:
                field["title"] = meta.label
            if meta.value_labels:
                field["labels"] = {_plain(k): v for k, v in meta.value_labels.items()}
            if meta.display_format:
                field["format"] = meta.display_format
        fields.append(field)

    header: dict[str, Any] = {}
    table_attrs = df.attrs.get("tabio", {})
    for key in ("name", "description"):
        if table_attrs.get(key):
            header[key] = table_attrs[key]
    header["fields"] = fields

    options.setdefault("index", False)
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(f"{FRONT_MATTER}\n")
        f.write(yaml.safe_dump(header, sort_keys=False, allow_unicode=True))
        f.write(f"{FRONT_MATTER}\n")
        df.to_csv(f, **options)
