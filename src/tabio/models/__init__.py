"""Data models for tabio."""

from tabio.models.config import (
    CSVConfig,
    HTTPConfig,
    LoggingConfig,
    TabioConfig,
)
from tabio.models.enums import Direction, SourceKind
from tabio.models.table import (
    ColumnMetadata,
    FormatInfo,
    HandlerPair,
    ResolvedFormat,
    SourceSpec,
)

__all__ = [
    # Config models
    "CSVConfig",
    "HTTPConfig",
    "LoggingConfig",
    "TabioConfig",
    # Table models
    "ColumnMetadata",
    "FormatInfo",
    "HandlerPair",
    "ResolvedFormat",
    "SourceSpec",
    # Enums
    "Direction",
    "SourceKind",
]
