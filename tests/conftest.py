"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from tabio.config import reset_config
from tabio.core.logging import reset_logging
from tabio.io.registry import create_registry, reset_registry


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the tabio home directory at an empty temp dir for every test."""
    home = tmp_path / "tabio-home"
    home.mkdir()
    monkeypatch.setenv("TABIO_HOME_DIR", str(home))
    for name in ("TABIO_LOGGING__LEVEL", "TABIO_LOGGING__FILE", "TABIO_HTTP__TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    reset_registry()
    yield home
    reset_config()
    reset_registry()
    reset_logging()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def registry():
    """A fresh registry with the built-in formats."""
    return create_registry()


@pytest.fixture
def sample_df():
    """Small frame with integer, string and float columns."""
    return pd.DataFrame(
        {
            "a": [1, 2, 3],
            "b": ["x", "y", "z"],
            "c": [1.5, 2.5, 3.5],
        }
    )


@pytest.fixture
def sample_csv(temp_dir, sample_df):
    """Write the sample frame to a CSV file."""
    path = temp_dir / "sample.csv"
    sample_df.to_csv(path, index=False)
    return path


@pytest.fixture
def labelled_df():
    """Frame with variable and value labels attached."""
    from tabio.io.metadata import attach_metadata

    df = pd.DataFrame({"sex": [1, 2, 1, 2], "age": [34.0, 51.0, 27.0, 45.0]})
    return attach_metadata(
        df,
        {
            "sex": {"label": "Sex of respondent", "value_labels": {1: "male", 2: "female"}},
            "age": {"label": "Age in years"},
        },
    )
