"""Delimited text formats: csv, csv2, tsv, psv."""

from pathlib import Path
from typing import Any

import chardet
import pandas as pd
from loguru import logger

from tabio.config import get_config

# Format tag -> (separator, decimal mark)
DELIMITERS = {
    "csv": (",", "."),
    "csv2": (";", ","),
    "tsv": ("\t", "."),
    "psv": ("|", "."),
}


def detect_encoding(file_path: Path, sample_size: int = 65536) -> str:
    """Detect file encoding using chardet."""
    with open(file_path, 'rb') as f:
        raw_data = f.read(sample_size)

    if not raw_data:
        return 'utf-8'

    result = chardet.detect(raw_data)
    encoding = result.get('encoding') or 'utf-8'
    confidence = result.get('confidence') or 0

    # ASCII is a subset of utf-8; low confidence falls back to trying utf-8 first
    if encoding.lower() == 'ascii' or confidence < 0.5:
        try:
            raw_data.decode('utf-8')
            encoding = 'utf-8'
        except UnicodeDecodeError:
            encoding = encoding if confidence >= 0.5 else 'latin-1'

    logger.debug(f"Detected encoding for {file_path.name}: {encoding} (confidence: {confidence:.2%})")
    return encoding


def import_delimited(path: Path, tag: str = "csv", **options: Any) -> pd.DataFrame:
    """Read a delimited text file."""
    sep, decimal = DELIMITERS[tag]
    options.setdefault("sep", sep)
    options.setdefault("decimal", decimal)

    if "encoding" not in options:
        config = get_config()
        options["encoding"] = detect_encoding(path) if config.csv.detect_encoding else config.csv.encoding

    return pd.read_csv(path, **options)


def export_delimited(df: pd.DataFrame, path: Path, tag: str = "csv", **options: Any) -> None:
    """Write a delimited text file without the index."""
    sep, decimal = DELIMITERS[tag]
    options.setdefault("sep", sep)
    options.setdefault("decimal", decimal)
    options.setdefault("index", False)
    options.setdefault("encoding", get_config().csv.encoding)

    df.to_csv(path, **options)
