"""Statistical package files: Stata, SPSS, SAS.

Variable labels, value labels, storage formats and measurement levels are
collected into the uniform column metadata. Labelled codes are kept as
codes; use ``tabio.characterize`` or ``tabio.factorize`` to apply labels.
"""

from pathlib import Path
from typing import Any, Optional

import pandas as pd
from loguru import logger
from pandas.api.types import is_numeric_dtype

from tabio.dependencies import require
from tabio.io.metadata import attach_metadata, get_column_metadata
from tabio.models.table import ColumnMetadata

STATA_VERSION = 118

SPSS_MEASURES = ("nominal", "ordinal", "scale")


def _stata_label_names(reader: Any, df: pd.DataFrame) -> list[Any]:
    """Label set name attached to each variable, in column order.

    pandas has no public accessor for this pairing; ``StataReader._lbllist``
    has held it since pandas 1.0. Without it, label sets are paired with the
    variable of the same name, which is how ``DataFrame.to_stata`` names them.
    """
    label_names = getattr(reader, "_lbllist", None)
    if label_names is None:
        logger.warning(
            f"pandas {pd.__version__} does not expose Stata label set names; "
            "pairing value labels with variables by name"
        )
        return list(df.columns)
    return list(label_names)


def import_dta(path: Path, **options: Any) -> pd.DataFrame:
    """Read a Stata file, keeping value-labelled columns as codes."""
    options.setdefault("convert_categoricals", False)
    with pd.read_stata(path, iterator=True, **options) as reader:
        df = reader.read()
        variable_labels = reader.variable_labels()
        label_sets = reader.value_labels()
        label_names = _stata_label_names(reader, df)

    columns = {}
    for name, label_name in zip(df.columns, label_names):
        columns[name] = ColumnMetadata(
            label=variable_labels.get(name) or None,
            value_labels=label_sets.get(label_name, {}),
        )
    return attach_metadata(df, columns)


def _value_labels_for_stata(df: pd.DataFrame, metadata: dict[Any, ColumnMetadata]) -> dict[Any, dict[Any, str]]:
    labels = {}
    for name, meta in metadata.items():
        if not meta.value_labels or not is_numeric_dtype(df[name]):
            continue
        labels[name] = {_numeric_code(code): text for code, text in meta.value_labels.items()}
    return labels


def export_dta(df: pd.DataFrame, path: Path, **options: Any) -> None:
    """Write a Stata file with variable and value labels."""
    metadata = get_column_metadata(df)
    variable_labels = {name: meta.label for name, meta in metadata.items() if meta.label}
    value_labels = _value_labels_for_stata(df, metadata)

    options.setdefault("version", STATA_VERSION)
    options.setdefault("write_index", False)
    if variable_labels:
        options.setdefault("variable_labels", variable_labels)
    if value_labels:
        options.setdefault("value_labels", value_labels)
    df.to_stata(path, **options)


def _readstat_metadata(df: pd.DataFrame, meta: Any) -> dict[Any, ColumnMetadata]:
    labels = dict(zip(meta.column_names, meta.column_labels or []))
    value_labels = getattr(meta, "variable_value_labels", {}) or {}
    formats = getattr(meta, "original_variable_types", {}) or {}
    measures = getattr(meta, "variable_measure", {}) or {}

    columns = {}
    for name in df.columns:
        measure = measures.get(name)
        columns[name] = ColumnMetadata(
            label=labels.get(name) or None,
            value_labels={_label_key(code): text for code, text in value_labels.get(name, {}).items()},
            display_format=formats.get(name),
            measure=measure if measure in SPSS_MEASURES else None,
        )
    return columns


def _read_with_pyreadstat(reader_name: str, tag: str, path: Path, **options: Any) -> pd.DataFrame:
    pyreadstat = require("pyreadstat", tag)
    options.setdefault("apply_value_formats", False)
    df, meta = getattr(pyreadstat, reader_name)(str(path), **options)
    return attach_metadata(df, _readstat_metadata(df, meta))


def import_sav(path: Path, **options: Any) -> pd.DataFrame:
    """Read an SPSS .sav or .zsav file."""
    return _read_with_pyreadstat("read_sav", "sav", path, **options)


def import_por(path: Path, **options: Any) -> pd.DataFrame:
    """Read an SPSS portable file."""
    return _read_with_pyreadstat("read_por", "por", path, **options)


def import_xpt(path: Path, **options: Any) -> pd.DataFrame:
    """Read a SAS transport file."""
    pyreadstat = require("pyreadstat", "xpt")
    df, meta = pyreadstat.read_xport(str(path), **options)
    return attach_metadata(df, _readstat_metadata(df, meta))


def _column_labels(metadata: dict[Any, ColumnMetadata]) -> Optional[dict[str, str]]:
    labels = {str(name): meta.label for name, meta in metadata.items() if meta.label}
    return labels or None


def export_sav(df: pd.DataFrame, path: Path, compress: bool = False, **options: Any) -> None:
    """Write an SPSS file with variable labels, value labels and measures."""
    pyreadstat = require("pyreadstat", "zsav" if compress else "sav")
    metadata = get_column_metadata(df)

    value_labels = {
        str(name): {_numeric_code(code): text for code, text in meta.value_labels.items()}
        for name, meta in metadata.items()
        if meta.value_labels and is_numeric_dtype(df[name])
    }
    measures = {str(name): meta.measure for name, meta in metadata.items() if meta.measure in SPSS_MEASURES}

    options.setdefault("column_labels", _column_labels(metadata))
    if value_labels:
        options.setdefault("variable_value_labels", value_labels)
    if measures:
        options.setdefault("variable_measure", measures)
    pyreadstat.write_sav(df, str(path), compress=compress, **options)


def export_xpt(df: pd.DataFrame, path: Path, **options: Any) -> None:
    """Write a SAS transport (version 5) file with variable labels."""
    pyreadstat = require("pyreadstat", "xpt")
    options.setdefault("column_labels", _column_labels(get_column_metadata(df)))
    pyreadstat.write_xport(df, str(path), **options)


def import_sas7bdat(path: Path, **options: Any) -> pd.DataFrame:
    """Read a SAS data file."""
    options.setdefault("encoding", "infer")
    return pd.read_sas(path, format="sas7bdat", **options)


def _numeric_code(code: Any) -> Any:
    number = float(code)
    return int(number) if number.is_integer() else number


def _label_key(code: Any) -> Any:
    # readstat reports numeric codes as floats
    if isinstance(code, float) and code.is_integer():
        return int(code)
    return code
