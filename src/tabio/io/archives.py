"""Compression and single-member archive helpers."""

import bz2
import gzip
import lzma
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional

from loguru import logger

from tabio.core.exceptions import ArchiveMemberError, SourceResolutionError

STREAM_COMPRESSORS = {
    "gz": gzip.open,
    "bz2": bz2.open,
    "xz": lzma.open,
}

ARCHIVE_FORMATS = ("zip", "tar")


def is_archive(compression: Optional[str]) -> bool:
    """Check whether a compression suffix is a multi-member container."""
    return compression in ARCHIVE_FORMATS


def list_archive_members(path: Path, compression: str) -> list[str]:
    """List the file members of a zip or tar archive.

    Raises:
        SourceResolutionError: If the archive cannot be opened
    """
    try:
        if compression == "zip":
            with zipfile.ZipFile(path) as zf:
                return [info.filename for info in zf.infolist() if not info.is_dir()]
        if compression == "tar":
            with tarfile.open(path) as tf:
                return [member.name for member in tf.getmembers() if member.isfile()]
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as e:
        raise SourceResolutionError(f"Failed to open {compression} archive '{path}': {e}") from e
    raise ValueError(f"Not an archive format: {compression}")


def select_member(members: list[str], member: Optional[str], location: str) -> str:
    """Pick the archive member to read.

    Without an explicit ``member`` the archive must hold exactly one file.

    Raises:
        ArchiveMemberError: If the member is missing or the choice is ambiguous
    """
    if member is not None:
        if member in members:
            return member
        by_name = [m for m in members if PurePosixPath(m).name == member]
        if len(by_name) == 1:
            return by_name[0]
        raise ArchiveMemberError(
            f"Member '{member}' not found in archive '{location}'. Members: {members}"
        )

    if len(members) == 1:
        return members[0]
    if not members:
        raise ArchiveMemberError(f"Archive '{location}' contains no files")
    raise ArchiveMemberError(
        f"Archive '{location}' contains {len(members)} files; pass member= to choose one of: {members}"
    )


def extract_member(path: Path, compression: str, member: str, dest_dir: Path) -> Path:
    """Copy one archive member into ``dest_dir`` and return its path."""
    target = dest_dir / PurePosixPath(member).name
    try:
        if compression == "zip":
            with zipfile.ZipFile(path) as zf, zf.open(member) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        else:
            with tarfile.open(path) as tf:
                src = tf.extractfile(member)
                if src is None:
                    raise ArchiveMemberError(f"Member '{member}' of '{path}' is not a regular file")
                with src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (zipfile.BadZipFile, tarfile.TarError, KeyError) as e:
        raise SourceResolutionError(f"Failed to extract '{member}' from '{path}': {e}") from e

    logger.debug(f"Extracted '{member}' from {path} to {target}")
    return target


def decompress_file(path: Path, compression: str, target: Path) -> Path:
    """Decompress a gz/bz2/xz file to ``target``."""
    opener = STREAM_COMPRESSORS[compression]
    try:
        with opener(path, "rb") as src, open(target, "wb") as dst:
            shutil.copyfileobj(src, dst)
    except (OSError, EOFError, lzma.LZMAError) as e:
        raise SourceResolutionError(f"Failed to decompress '{path}' as {compression}: {e}") from e

    logger.debug(f"Decompressed {path} to {target}")
    return target


def compress_file(source: Path, target: Path, compression: str, arcname: Optional[str] = None) -> Path:
    """Write ``source`` into ``target`` wrapped in ``compression``.

    Archives hold a single member named ``arcname`` (default: the source name).
    """
    arcname = arcname or source.name
    if compression == "zip":
        with zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.write(source, arcname)
    elif compression == "tar":
        with tarfile.open(target, "w") as tf:
            tf.add(source, arcname=arcname)
    elif compression in STREAM_COMPRESSORS:
        with open(source, "rb") as src, STREAM_COMPRESSORS[compression](target, "wb") as dst:
            shutil.copyfileobj(src, dst)
    else:
        raise ValueError(f"Unsupported compression: {compression}")

    logger.debug(f"Compressed {source} into {target} ({compression})")
    return target


def strip_suffix(name: str, compression: str) -> str:
    """Drop a trailing compression suffix from a file name, case-insensitively."""
    suffix = f".{compression}"
    if name.lower().endswith(suffix):
        return name[: -len(suffix)]
    return name
