"""Optional codec libraries behind the built-in formats."""

import importlib
import importlib.util
import subprocess
import sys
from types import ModuleType
from typing import Callable, Iterable, Optional

from loguru import logger

from tabio.core.exceptions import MissingDependencyError, TabioError

# Import name -> distribution name on the package index
PACKAGES = {
    "openpyxl": "openpyxl",
    "xlrd": "xlrd",
    "odf": "odfpy",
    "lxml": "lxml",
    "lxml.html": "lxml",
    "pyarrow": "pyarrow",
    "pyreadstat": "pyreadstat",
}

# Format tag -> import names its handlers need
FORMAT_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "xlsx": ("openpyxl",),
    "xls": ("xlrd",),
    "ods": ("odf",),
    "html": ("lxml",),
    "xml": ("lxml",),
    "parquet": ("pyarrow",),
    "feather": ("pyarrow",),
    "orc": ("pyarrow",),
    "sav": ("pyreadstat",),
    "zsav": ("pyreadstat",),
    "por": ("pyreadstat",),
    "xpt": ("pyreadstat",),
}


def require(module: str, fmt: str) -> ModuleType:
    """Import a codec module, raising a helpful error if it is missing."""
    try:
        return importlib.import_module(module)
    except ImportError as e:
        raise MissingDependencyError(PACKAGES.get(module, module), fmt) from e


def is_available(module: str) -> bool:
    """Check whether a module can be imported, without importing it."""
    return importlib.util.find_spec(module) is not None


def missing_formats(formats: Optional[Iterable[str]] = None) -> dict[str, list[str]]:
    """Formats whose codec libraries are not installed.

    Returns:
        Mapping of format tag to the missing distribution names
    """
    tags = list(formats) if formats is not None else list(FORMAT_DEPENDENCIES)
    missing = {}
    for tag in tags:
        packages = [PACKAGES.get(m, m) for m in FORMAT_DEPENDENCIES.get(tag, ()) if not is_available(m)]
        if packages:
            missing[tag] = packages
    return missing


def install_formats(
    formats: Optional[Iterable[str]] = None,
    dry_run: bool = False,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> list[str]:
    """Install the codec libraries of formats that are not usable yet.

    Args:
        formats: Format tags to cover (default: every optional format)
        dry_run: Only report what would be installed
        runner: Function used to run pip (``subprocess.run`` signature)

    Returns:
        Distribution names that were (or would be) installed
    """
    packages = sorted({p for names in missing_formats(formats).values() for p in names})
    if not packages:
        logger.info("All optional format dependencies are installed")
        return []

    if dry_run:
        return packages

    command = [sys.executable, "-m", "pip", "install", *packages]
    logger.info(f"Installing format dependencies: {' '.join(packages)}")
    result = runner(command, capture_output=True, text=True)
    if result.returncode != 0:
        raise TabioError(f"Failed to install {', '.join(packages)}: {result.stderr.strip()}")

    importlib.invalidate_caches()
    return packages
