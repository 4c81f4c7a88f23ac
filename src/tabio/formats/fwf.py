"""Fixed-width text.

Export pads every column to its widest value, with one space between
columns, and writes a header row. Import infers column boundaries, so
values containing spaces and dtypes do not always survive a round trip.
"""

from pathlib import Path
from typing import Any, Optional

import pandas as pd
from pandas.api.types import is_numeric_dtype


def import_fwf(path: Path, widths: Optional[list[int]] = None, **options: Any) -> pd.DataFrame:
    """Read a fixed-width file; ``widths`` or ``colspecs`` override inference."""
    if widths is not None:
        options["widths"] = widths
    else:
        options.setdefault("colspecs", "infer")
        options.setdefault("infer_nrows", 1000)
    return pd.read_fwf(path, **options)


def export_fwf(
    df: pd.DataFrame,
    path: Path,
    header: bool = True,
    na_rep: str = "",
    encoding: str = "utf-8",
) -> None:
    """Write a fixed-width file."""
    cells = {
        name: [na_rep if pd.isna(value) else str(value) for value in df[name]]
        for name in df.columns
    }
    widths = {
        name: max([len(v) for v in values] + [len(str(name)) if header else 0, 1])
        for name, values in cells.items()
    }
    numeric = {name: is_numeric_dtype(df[name]) for name in df.columns}

    def pad(name: Any, value: str) -> str:
        width = widths[name]
        return value.rjust(width) if numeric[name] else value.ljust(width)

    lines = []
    if header:
        lines.append(" ".join(pad(name, str(name)) for name in df.columns).rstrip())
    for i in range(len(df)):
        lines.append(" ".join(pad(name, cells[name][i]) for name in df.columns).rstrip())

    with open(path, "w", encoding=encoding, newline="\n") as f:
        f.write("\n".join(lines))
        f.write("\n")
