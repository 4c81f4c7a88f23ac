"""Unit tests for main CLI module."""

import sys
from unittest.mock import patch

import pandas as pd
import pytest
from typer.testing import CliRunner

from tabio.cli.main import app, main
from tabio.io.exporter import export_file


@pytest.fixture
def runner():
    return CliRunner()


class TestConvertCommand:
    """Test the convert command."""

    def test_convert(self, runner, temp_dir, sample_csv):
        target = temp_dir / "out.json"
        result = runner.invoke(app, ["convert", str(sample_csv), str(target)])

        assert result.exit_code == 0
        assert str(target) in result.stdout
        assert pd.read_json(target)["a"].tolist() == [1, 2, 3]

    def test_convert_with_formats(self, runner, temp_dir):
        source = temp_dir / "in.txt"
        source.write_text("a|b\n1|2\n")
        target = temp_dir / "out.dat"
        result = runner.invoke(app, ["convert", str(source), str(target), "--in-format", "psv", "--out-format", "tsv"])

        assert result.exit_code == 0
        assert target.read_text().splitlines() == ["a\tb", "1\t2"]

    def test_convert_error(self, runner, temp_dir, sample_csv):
        result = runner.invoke(app, ["convert", str(sample_csv), str(temp_dir / "out.xls")])
        assert result.exit_code == 1
        assert "does not support export" in result.stdout


class TestInfoCommand:
    """Test the info command."""

    def test_info(self, runner, temp_dir, labelled_df):
        path = export_file(labelled_df, temp_dir / "survey.dta")
        result = runner.invoke(app, ["info", str(path)])

        assert result.exit_code == 0
        assert "Format: dta" in result.stdout
        assert "Rows: 4" in result.stdout
        assert "Sex of respondent" in result.stdout

    def test_info_known_elsewhere(self, runner, temp_dir):
        result = runner.invoke(app, ["info", str(temp_dir / "model.rds")])
        assert result.exit_code == 1
        assert "pyreadr" in result.stdout

    def test_info_missing_file(self, runner, temp_dir):
        result = runner.invoke(app, ["info", str(temp_dir / "missing.csv")])
        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestFormatsCommands:
    """Test formats and install-formats."""

    def test_formats(self, runner):
        with patch("tabio.cli.main.missing_formats", return_value={"xls": ["xlrd"]}):
            result = runner.invoke(app, ["formats"])

        assert result.exit_code == 0
        assert "parquet" in result.stdout
        assert "sas7bdat" in result.stdout
        assert "install-formats" in result.stdout

    def test_install_formats_dry_run(self, runner):
        with patch("tabio.cli.main.install_formats", return_value=["pyarrow"]) as mock_install:
            result = runner.invoke(app, ["install-formats", "parquet", "--dry-run"])

        assert result.exit_code == 0
        assert "Would install: pyarrow" in result.stdout
        mock_install.assert_called_once_with(["parquet"], dry_run=True)

    def test_install_formats_nothing_missing(self, runner):
        with patch("tabio.cli.main.install_formats", return_value=[]):
            result = runner.invoke(app, ["install-formats"])

        assert result.exit_code == 0
        assert "All format libraries are installed" in result.stdout


class TestGlobalOptions:
    """Test logging options and the entry point."""

    def test_log_file(self, runner, temp_dir, sample_csv):
        log_file = temp_dir / "tabio.log"
        result = runner.invoke(
            app,
            ["--log-level", "debug", "--log-file", str(log_file), "convert", str(sample_csv), str(temp_dir / "o.csv")],
        )

        assert result.exit_code == 0
        from tabio.core.logging import reset_logging

        reset_logging()
        assert "Converting" in log_file.read_text()

    def test_main_without_arguments_shows_help(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["tabio"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
