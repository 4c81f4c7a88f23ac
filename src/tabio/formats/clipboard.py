"""System clipboard, as tab-separated text."""

from typing import Any

import pandas as pd


def import_clipboard(path: None = None, **options: Any) -> pd.DataFrame:
    options.setdefault("sep", "\t")
    return pd.read_clipboard(**options)


def export_clipboard(df: pd.DataFrame, path: None = None, **options: Any) -> None:
    options.setdefault("index", False)
    options.setdefault("excel", True)
    df.to_clipboard(**options)
