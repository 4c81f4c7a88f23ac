"""Per-column metadata carried on imported tables.

Metadata lives in ``DataFrame.attrs["tabio"]``::

    {
        "format": "dta",
        "source": "survey.dta",
        "columns": {"sex": {"label": "Sex", "value_labels": {1: "male", 2: "female"}}},
    }

Handlers attach what their format knows; the import engine fills in the
storage type of every column. Nothing here changes the data itself except
``characterize`` and ``factorize``, which return new frames.
"""

from typing import Any, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from tabio.models.table import ColumnMetadata

ATTRS_KEY = "tabio"

MetadataLike = Union[ColumnMetadata, Mapping[str, Any]]


def _as_metadata(value: MetadataLike) -> ColumnMetadata:
    if isinstance(value, ColumnMetadata):
        return value
    return ColumnMetadata(**value)


def _table_attrs(df: pd.DataFrame) -> dict[str, Any]:
    attrs = df.attrs.get(ATTRS_KEY)
    if not isinstance(attrs, dict):
        attrs = {"columns": {}}
        df.attrs[ATTRS_KEY] = attrs
    attrs.setdefault("columns", {})
    return attrs


def get_column_metadata(df: pd.DataFrame) -> dict[Any, ColumnMetadata]:
    """Get the metadata of every column that has any."""
    columns = df.attrs.get(ATTRS_KEY, {}).get("columns", {})
    return {name: ColumnMetadata(**meta) for name, meta in columns.items() if name in df.columns}


def set_column_metadata(df: pd.DataFrame, column: Any, **fields: Any) -> pd.DataFrame:
    """Set metadata fields (``label``, ``value_labels``...) of one column in place.

    Returns the same frame so calls can be chained.
    """
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not found")
    attach_metadata(df, {column: ColumnMetadata(**fields)})
    return df


def attach_metadata(
    df: pd.DataFrame,
    columns: Optional[Mapping[Any, MetadataLike]] = None,
    **table_fields: Any,
) -> pd.DataFrame:
    """Merge column metadata and table-level fields into ``df.attrs`` in place.

    Entries for columns that are not in the frame are ignored.
    """
    attrs = _table_attrs(df)
    for name, value in (columns or {}).items():
        if name not in df.columns:
            continue
        existing = ColumnMetadata(**attrs["columns"].get(name, {}))
        merged = existing.merge(_as_metadata(value))
        attrs["columns"][name] = merged.model_dump(exclude_defaults=True)
    for key, value in table_fields.items():
        if value is not None:
            attrs[key] = value
    return df


def complete_metadata(df: pd.DataFrame, **table_fields: Any) -> pd.DataFrame:
    """Give every column a metadata entry with at least its storage type."""
    attrs = _table_attrs(df)
    columns = {}
    # Positional so duplicate column names keep working
    for name, dtype in zip(df.columns, df.dtypes):
        if name in columns:
            continue
        meta = dict(attrs["columns"].get(name, {}))
        meta.setdefault("storage_type", str(dtype))
        columns[name] = meta
    attrs["columns"] = columns
    for key, value in table_fields.items():
        if value is not None:
            attrs[key] = value
    return df


def _labelled_columns(df: pd.DataFrame, columns: Optional[Iterable[Any]]) -> dict[Any, dict[Any, str]]:
    metadata = get_column_metadata(df)
    selected = list(columns) if columns is not None else list(metadata)
    return {
        name: metadata[name].value_labels
        for name in selected
        if name in metadata and metadata[name].value_labels
    }


def _lookup_label(labels: dict[Any, str], value: Any) -> Any:
    if pd.isna(value):
        return value
    if value in labels:
        return labels[value]
    # Labels keyed by int but values stored as float (or the reverse)
    if isinstance(value, (float, np.floating)) and float(value).is_integer() and int(value) in labels:
        return labels[int(value)]
    return value


def characterize(df: pd.DataFrame, columns: Optional[Iterable[Any]] = None) -> pd.DataFrame:
    """Replace value-labelled codes with their labels as strings.

    Codes without a label keep their value (as a string). Returns a copy.
    """
    result = df.copy()
    for name, labels in _labelled_columns(df, columns).items():
        converted = df[name].map(lambda v, labels=labels: _lookup_label(labels, v))
        result[name] = converted.map(lambda v: v if pd.isna(v) else str(v)).astype(object)
    return result


def factorize(df: pd.DataFrame, columns: Optional[Iterable[Any]] = None) -> pd.DataFrame:
    """Turn value-labelled columns into categoricals ordered like their codes.

    Returns a copy.
    """
    result = df.copy()
    for name, labels in _labelled_columns(df, columns).items():
        categories = [labels[code] for code in sorted(labels, key=lambda c: (str(type(c)), c))]
        for value in df[name].dropna().unique():
            label = _lookup_label(labels, value)
            if label not in categories:
                categories.append(label)
        converted = df[name].map(lambda v, labels=labels: _lookup_label(labels, v))
        result[name] = pd.Categorical(converted, categories=list(dict.fromkeys(categories)))
    return result
