"""Binary columnar and Python-native formats: parquet, feather, orc, pickle."""

from pathlib import Path
from typing import Any

import pandas as pd

from tabio.dependencies import require


def import_parquet(path: Path, **options: Any) -> pd.DataFrame:
    require("pyarrow", "parquet")
    return pd.read_parquet(path, engine="pyarrow", **options)


def export_parquet(df: pd.DataFrame, path: Path, **options: Any) -> None:
    require("pyarrow", "parquet")
    options.setdefault("index", False)
    df.to_parquet(path, engine="pyarrow", **options)


def import_feather(path: Path, **options: Any) -> pd.DataFrame:
    require("pyarrow", "feather")
    return pd.read_feather(path, **options)


def export_feather(df: pd.DataFrame, path: Path, **options: Any) -> None:
    require("pyarrow", "feather")
    # Feather only stores a default RangeIndex
    df.reset_index(drop=True).to_feather(path, **options)


def import_orc(path: Path, **options: Any) -> pd.DataFrame:
    require("pyarrow", "orc")
    return pd.read_orc(path, **options)


def export_orc(df: pd.DataFrame, path: Path, **options: Any) -> None:
    require("pyarrow", "orc")
    df.reset_index(drop=True).to_orc(path, **options)


def import_pickle(path: Path, **options: Any) -> pd.DataFrame:
    """Read a pickled DataFrame. Only load pickles from trusted sources."""
    return pd.read_pickle(path, **options)


def export_pickle(df: pd.DataFrame, path: Path, **options: Any) -> None:
    df.to_pickle(path, **options)
