"""Resolution of file specs (local path, URL, archive, clipboard) to readable files."""

import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

import requests
from loguru import logger

from tabio.config import get_config
from tabio.core.exceptions import FormatError, SourceResolutionError, UnrecognizedFormatError
from tabio.io.archives import (
    STREAM_COMPRESSORS,
    decompress_file,
    extract_member,
    is_archive,
    list_archive_members,
    select_member,
    strip_suffix,
)
from tabio.io.extensions import CLIPBOARD, canonical_format, file_name, resolve_format, split_extensions
from tabio.io.registry import FormatRegistry
from tabio.models.config import TabioConfig
from tabio.models.enums import SourceKind
from tabio.models.table import ResolvedFormat, SourceSpec

URL_SCHEMES = ("http://", "https://", "ftp://")

GOOGLE_SHEETS_PATTERN = re.compile(r"^https?://docs\.google\.com/spreadsheets/d/(?P<id>[A-Za-z0-9_-]+)")
GOOGLE_SHEETS_FORMATS = ("csv", "tsv", "xlsx", "ods")

CONTENT_DISPOSITION_PATTERN = re.compile(r"filename\*?=(?:UTF-8'')?\"?([^\";]+)\"?", re.IGNORECASE)

CONTENT_TYPES = {
    "text/csv": "csv",
    "application/csv": "csv",
    "text/tab-separated-values": "tsv",
    "application/json": "json",
    "application/x-ndjson": "jsonl",
    "application/x-yaml": "yaml",
    "application/yaml": "yaml",
    "text/yaml": "yaml",
    "text/html": "html",
    "application/xml": "xml",
    "text/xml": "xml",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.oasis.opendocument.spreadsheet": "ods",
    "application/vnd.apache.parquet": "parquet",
    "application/x-stata-dta": "dta",
    "application/x-spss-sav": "sav",
    "application/zip": "zip",
    "application/gzip": "gz",
    "application/x-gzip": "gz",
}


def is_url(path: str) -> bool:
    """Check whether a file spec is a remote URL."""
    return path.lower().startswith(URL_SCHEMES)


def google_sheets_export_url(url: str, format: Optional[str] = None) -> Optional[Tuple[str, str]]:
    """Rewrite a Google Sheets sharing link to its export endpoint.

    Returns:
        ``(export_url, tag)`` or None if ``url`` is not a Google Sheets link

    Raises:
        FormatError: If the export endpoint does not offer ``format``
    """
    match = GOOGLE_SHEETS_PATTERN.match(url)
    if match is None:
        return None

    if format is not None and format not in GOOGLE_SHEETS_FORMATS:
        raise FormatError(
            f"Google Sheets can only be exported as {', '.join(GOOGLE_SHEETS_FORMATS)}; got '{format}'"
        )
    tag = format or "csv"
    export_url = f"https://docs.google.com/spreadsheets/d/{match.group('id')}/export?format={tag}"
    gid = re.search(r"[#&?]gid=(\d+)", url)
    if gid:
        export_url += f"&gid={gid.group(1)}"
    return export_url, tag


def locate_source(
    file: str,
    format: Optional[str] = None,
    member: Optional[str] = None,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
) -> SourceSpec:
    """Describe where a table comes from and which format it is in.

    URLs whose format cannot be read from the link are resolved again
    after download.
    """
    config = config or get_config()
    file = str(file)

    if file.strip().lower() == CLIPBOARD or (format is not None and canonical_format(format, registry) == CLIPBOARD):
        return SourceSpec(SourceKind.CLIPBOARD, CLIPBOARD, ResolvedFormat(CLIPBOARD))

    if is_url(file):
        tag = canonical_format(format, registry) if format is not None else None
        sheet = google_sheets_export_url(file, tag)
        if sheet is not None:
            export_url, sheet_tag = sheet
            logger.debug(f"Google Sheets link {file} rewritten to {export_url}")
            return SourceSpec(SourceKind.URL, export_url, ResolvedFormat(sheet_tag), member)
        try:
            resolved = resolve_format(file, format, registry, config.compression_formats)
        except UnrecognizedFormatError:
            # Shortened or extension-less link: decide after download
            resolved = ResolvedFormat(None, None)
        return SourceSpec(SourceKind.URL, file, resolved, member)

    resolved = resolve_format(file, format, registry, config.compression_formats)
    if member is not None and format is None and is_archive(resolved.compression):
        # A named member is read according to its own extension
        resolved = ResolvedFormat(None, resolved.compression)
    return SourceSpec(SourceKind.LOCAL, file, resolved, member)


def _remote_file_name(response: requests.Response) -> str:
    """File name for a downloaded response: final URL, then headers."""
    name = file_name(response.url)
    if split_extensions(name):
        return name

    disposition = response.headers.get("Content-Disposition", "")
    match = CONTENT_DISPOSITION_PATTERN.search(disposition)
    if match:
        return Path(match.group(1).strip()).name

    content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    ext = CONTENT_TYPES.get(content_type)
    base = name or "download"
    return f"{base}.{ext}" if ext else base


def fetch_url(url: str, dest_dir: Path, config: Optional[TabioConfig] = None) -> Path:
    """Download a URL into ``dest_dir``, following redirects.

    Raises:
        SourceResolutionError: On any network failure or HTTP error status
    """
    config = config or get_config()
    headers = {"User-Agent": config.http.user_agent}

    logger.info(f"Downloading {url}")
    try:
        with requests.get(
            url,
            headers=headers,
            timeout=config.http.timeout,
            stream=True,
            allow_redirects=True,
        ) as response:
            response.raise_for_status()
            if response.url != url:
                logger.debug(f"{url} redirected to {response.url}")

            target = dest_dir / _remote_file_name(response)
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=config.http.chunk_size):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        raise SourceResolutionError(f"Failed to fetch '{url}': {e}") from e

    logger.debug(f"Downloaded {url} to {target} ({target.stat().st_size} bytes)")
    return target


@contextmanager
def open_source(
    spec: SourceSpec,
    registry: Optional[FormatRegistry] = None,
    config: Optional[TabioConfig] = None,
) -> Iterator[Tuple[Optional[Path], str]]:
    """Stage a source as a local uncompressed file.

    Yields:
        ``(path, tag)``; ``path`` is None for the clipboard. Temporary
        downloads and extracted members are removed on exit.

    Raises:
        SourceResolutionError: Missing file, failed download, bad archive
        ArchiveMemberError: Archive member missing or ambiguous
    """
    config = config or get_config()

    if spec.kind is SourceKind.CLIPBOARD:
        yield None, CLIPBOARD
        return

    with tempfile.TemporaryDirectory(prefix="tabio-", dir=config.temp_dir) as tmp:
        tmp_dir = Path(tmp)
        resolved = spec.format

        if spec.kind is SourceKind.URL:
            path = fetch_url(spec.location, tmp_dir, config)
            if resolved.tag is None and resolved.compression is None:
                try:
                    resolved = resolve_format(path.name, None, registry, config.compression_formats)
                except UnrecognizedFormatError as e:
                    raise UnrecognizedFormatError(
                        e.format, f"Cannot determine the format of '{spec.location}'. Pass format= explicitly."
                    ) from e
        else:
            path = Path(spec.location).expanduser()
            if not path.is_file():
                raise SourceResolutionError(f"File not found: {spec.location}")

        tag = resolved.tag
        compression = resolved.compression

        if compression in STREAM_COMPRESSORS:
            path = decompress_file(path, compression, tmp_dir / strip_suffix(path.name, compression))
        elif is_archive(compression):
            members = list_archive_members(path, compression)
            chosen = select_member(members, spec.member, spec.location)
            path = extract_member(path, compression, chosen, tmp_dir)

        if tag is None:
            tag = resolve_format(path.name, None, registry, config.compression_formats).tag
            if tag is None:
                raise UnrecognizedFormatError(None, f"Cannot determine the format inside '{spec.location}'")

        yield path, tag
