"""File extension to format tag resolution."""

from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterable, Optional
from urllib.parse import urlparse

from loguru import logger

from tabio.core.exceptions import KnownButUnsupportedError, UnrecognizedFormatError
from tabio.io.registry import FormatRegistry, get_registry
from tabio.models.enums import Direction
from tabio.models.table import FormatInfo, ResolvedFormat

DEFAULT_COMPRESSION_FORMATS = ("gz", "bz2", "xz", "zip", "tar")

CLIPBOARD = "clipboard"

# Canonical tag -> accepted aliases (the tag itself is always accepted)
FORMATS: dict[str, tuple[str, ...]] = {
    "csv": (",",),
    "csv2": (";",),
    "tsv": ("tab", "txt", "\t"),
    "psv": ("|",),
    "fwf": (),
    "csvy": (),
    "json": (),
    "jsonl": ("ndjson",),
    "yaml": ("yml",),
    "xlsx": ("excel", "xlsm"),
    "xls": (),
    "ods": (),
    "html": ("htm",),
    "xml": (),
    "parquet": ("pq",),
    "feather": ("arrow",),
    "orc": (),
    "pickle": ("pkl",),
    "dta": ("stata",),
    "sav": ("spss",),
    "zsav": (),
    "por": (),
    "sas7bdat": ("sas",),
    "xpt": ("xport",),
    CLIPBOARD: (),
}

# Extensions with a known reader outside tabio -> what to use instead
KNOWN_ELSEWHERE: dict[str, str] = {
    "rds": "pyreadr.read_r() from the 'pyreadr' package",
    "rdata": "pyreadr.read_r() from the 'pyreadr' package",
    "rda": "pyreadr.read_r() from the 'pyreadr' package",
    "accdb": "access_parser.AccessParser from the 'access-parser' package, or pyodbc with the Microsoft Access ODBC driver",
    "mdb": "access_parser.AccessParser from the 'access-parser' package, or pyodbc with the Microsoft Access ODBC driver",
    "mat": "scipy.io.loadmat() from the 'scipy' package",
    "arff": "scipy.io.arff.loadarff() from the 'scipy' package",
    "dbf": "dbfread.DBF from the 'dbfread' package",
    "h5": "pandas.read_hdf() with the 'tables' package",
    "hdf5": "pandas.read_hdf() with the 'tables' package",
    "hdf": "pandas.read_hdf() with the 'tables' package",
    "sas7bcat": "pyreadstat.read_sas7bcat() from the 'pyreadstat' package",
    "sqlite": "sqlite3 with pandas.read_sql()",
    "sqlite3": "sqlite3 with pandas.read_sql()",
    "db": "sqlite3 with pandas.read_sql()",
    "shp": "geopandas.read_file() from the 'geopandas' package",
    "gpkg": "geopandas.read_file() from the 'geopandas' package",
    "geojson": "geopandas.read_file() from the 'geopandas' package",
    "nc": "xarray.open_dataset() from the 'xarray' package",
    "npy": "numpy.load()",
    "npz": "numpy.load()",
    "gexf": "networkx.read_gexf() from the 'networkx' package",
    "graphml": "networkx.read_graphml() from the 'networkx' package",
    "fst": "the R 'fst' package (no Python reader exists)",
    "qs": "the R 'qs' package (no Python reader exists)",
    "syd": "the R 'foreign' package, read.systat()",
    "sys": "the R 'foreign' package, read.systat()",
    "mtp": "the R 'foreign' package, read.mtp()",
    "rec": "the R 'foreign' package, read.epiinfo()",
    "dif": "the R 'utils' package, read.DIF()",
    "pzfx": "the R 'pzfx' package",
}

_ALIASES: dict[str, str] = {
    alias: tag for tag, aliases in FORMATS.items() for alias in (tag, *aliases)
}


def file_name(path: str) -> str:
    """Get the file name part of a local path or URL."""
    if "://" in path:
        return PurePosixPath(urlparse(path).path).name
    return PureWindowsPath(path).name if "\\" in path else PurePosixPath(path).name


def canonical_format(token: str, registry: Optional[FormatRegistry] = None) -> str:
    """Map an extension or format alias to its canonical tag.

    Raises:
        KnownButUnsupportedError: For extensions read by another library
        UnrecognizedFormatError: For anything else not in the format table
    """
    key = token if token.isspace() else token.strip().lower().lstrip(".")
    registry = registry or get_registry()

    if key in registry:
        return registry.canonical(key)
    if key in _ALIASES:
        return _ALIASES[key]
    if key in KNOWN_ELSEWHERE:
        raise KnownButUnsupportedError(key, KNOWN_ELSEWHERE[key])
    raise UnrecognizedFormatError(key)


def split_extensions(path: str) -> list[str]:
    """Extension tokens of a path, left to right, lower-cased."""
    name = file_name(path).lstrip(".")
    return [token.lower() for token in name.split(".")[1:] if token]


def resolve_format(
    path: str,
    format: Optional[str] = None,
    registry: Optional[FormatRegistry] = None,
    compression_formats: Optional[Iterable[str]] = None,
) -> ResolvedFormat:
    """Resolve a file name or URL to a format tag and compression wrapper.

    The trailing extension is checked for a compression suffix first
    (``data.tsv.gz`` -> ``tsv`` inside ``gz``). An explicit ``format``
    replaces the inner format but keeps the compression wrapper.

    Args:
        path: File path or URL
        format: Explicit format or alias overriding the extension
        registry: Registry used for runtime-registered formats
        compression_formats: Suffixes treated as compression wrappers

    Returns:
        ResolvedFormat with ``tag`` None only for a bare archive

    Raises:
        KnownButUnsupportedError: Extension is read by another library
        UnrecognizedFormatError: Extension is unknown or missing
    """
    compression_formats = tuple(compression_formats or DEFAULT_COMPRESSION_FORMATS)

    # The clipboard pseudo-file wins over any explicit format
    if path.strip().lower() == CLIPBOARD:
        return ResolvedFormat(CLIPBOARD)

    tokens = split_extensions(path)
    compression = None
    if tokens and tokens[-1] in compression_formats:
        compression = tokens.pop()

    if format is not None:
        tag = canonical_format(format, registry)
    elif tokens:
        tag = canonical_format(tokens[-1], registry)
    elif compression is not None:
        # Inner format is decided by the archive member
        tag = None
    else:
        raise UnrecognizedFormatError(
            None, f"Cannot determine the format of '{path}': no file extension. Pass format= explicitly."
        )

    logger.debug(f"Resolved '{path}' to format={tag} compression={compression}")
    return ResolvedFormat(tag, compression)


def get_ext(path: str, registry: Optional[FormatRegistry] = None) -> Optional[str]:
    """Get the canonical format tag of a file name or URL."""
    return resolve_format(path, registry=registry).tag


def get_info(
    path: str,
    format: Optional[str] = None,
    registry: Optional[FormatRegistry] = None,
) -> FormatInfo:
    """Describe how tabio would treat a file.

    Known-elsewhere formats are reported instead of raised; truly
    unrecognized formats still raise ``UnrecognizedFormatError``.
    """
    registry = registry or get_registry()
    try:
        resolved = resolve_format(path, format, registry=registry)
    except KnownButUnsupportedError as e:
        return FormatInfo(input=path, format=e.format, known_elsewhere=e.suggestion)

    tag = resolved.tag
    return FormatInfo(
        input=path,
        format=tag,
        compression=resolved.compression,
        import_supported=tag is not None and registry.supports(tag, Direction.IMPORT),
        export_supported=tag is not None and registry.supports(tag, Direction.EXPORT),
        library=registry.library(tag) if tag is not None and tag in registry else None,
    )
