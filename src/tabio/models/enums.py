"""Enums for tabio models."""

from enum import Enum


class Direction(str, Enum):
    """Handler direction."""

    IMPORT = "import"
    EXPORT = "export"


class SourceKind(str, Enum):
    """Where the bytes of a source come from."""

    LOCAL = "local"
    URL = "url"
    CLIPBOARD = "clipboard"
