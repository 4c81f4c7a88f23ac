"""Table and format description models."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from tabio.models.enums import SourceKind


class ColumnMetadata(BaseModel):
    """Format-specific metadata collected for one column."""

    label: Optional[str] = Field(default=None, description="Variable label")
    value_labels: dict[Any, str] = Field(default_factory=dict, description="Value code to label")
    storage_type: Optional[str] = Field(default=None, description="Storage type in the source")
    display_format: Optional[str] = Field(default=None, description="Display format in the source")
    measure: Optional[str] = Field(default=None, description="Measurement level (nominal, ordinal, scale)")

    def merge(self, other: "ColumnMetadata") -> "ColumnMetadata":
        """Return a copy with fields of ``other`` that are set taking precedence."""
        data = self.model_dump()
        for key, value in other.model_dump(exclude_defaults=True).items():
            data[key] = value
        return ColumnMetadata(**data)


class FormatInfo(BaseModel):
    """Description of the format a file resolves to."""

    input: str
    format: Optional[str]
    compression: Optional[str] = None
    import_supported: bool = False
    export_supported: bool = False
    library: Optional[str] = None
    known_elsewhere: Optional[str] = None


@dataclass(frozen=True)
class ResolvedFormat:
    """Inner format tag plus an optional compression wrapper."""

    tag: Optional[str]
    compression: Optional[str] = None


@dataclass(frozen=True)
class HandlerPair:
    """Import and export functions registered for one format tag."""

    import_fn: Optional[Callable[..., Any]] = None
    export_fn: Optional[Callable[..., Any]] = None
    import_all_fn: Optional[Callable[..., Any]] = None
    library: Optional[str] = None
    multi_table: bool = False


@dataclass(frozen=True)
class SourceSpec:
    """Resolved description of where the bytes of a table come from."""

    kind: SourceKind
    location: str
    format: ResolvedFormat
    member: Optional[str] = None

    @property
    def compression(self) -> Optional[str]:
        return self.format.compression
