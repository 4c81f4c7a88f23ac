"""Unit tests for convert."""

import pandas as pd
import pytest

from tabio.core.exceptions import (
    ExportError,
    HandlerDirectionUnavailableError,
    SourceResolutionError,
    UnrecognizedFormatError,
)
from tabio.io.convert import convert
from tabio.io.exporter import export_file
from tabio.io.importer import import_file


class TestConvert:
    """Test convert."""

    def test_matches_import_then_export(self, temp_dir, sample_csv):
        """convert(a, b) writes the same bytes as export(import(a), b)."""
        converted = convert(sample_csv, temp_dir / "converted.tsv")
        manual = export_file(import_file(sample_csv), temp_dir / "manual.tsv")

        assert converted == temp_dir / "converted.tsv"
        assert converted.read_bytes() == manual.read_bytes()

    def test_formats_override_extensions(self, temp_dir):
        source = temp_dir / "in.txt"
        source.write_text("a;b\n1;2\n")
        target = convert(source, temp_dir / "out.dat", in_format="csv2", out_format="json")
        assert pd.read_json(target)["b"].tolist() == [2]

    def test_options(self, temp_dir, sample_csv):
        target = convert(
            sample_csv,
            temp_dir / "out.csv",
            in_options={"usecols": ["a", "b"]},
            out_options={"sep": ";"},
        )
        assert target.read_text().splitlines()[0] == "a;b"

    def test_compressed_target(self, temp_dir, sample_csv, sample_df):
        target = convert(sample_csv, temp_dir / "out.json.gz")
        pd.testing.assert_frame_equal(import_file(target), sample_df, check_dtype=False)

    def test_output_checked_before_import(self, temp_dir):
        """An unwritable target fails before the input is even read."""
        with pytest.raises(HandlerDirectionUnavailableError):
            convert(temp_dir / "does-not-exist.csv", temp_dir / "out.xls")

    def test_unknown_output_format(self, temp_dir):
        with pytest.raises(UnrecognizedFormatError):
            convert(temp_dir / "does-not-exist.csv", temp_dir / "out.unknownext")

    def test_bare_archive_target(self, temp_dir, sample_csv):
        with pytest.raises(ExportError):
            convert(sample_csv, temp_dir / "out.zip")

    def test_import_failure_leaves_nothing(self, temp_dir, registry):
        tags_before = registry.tags()
        target = temp_dir / "out.csv"

        with pytest.raises(SourceResolutionError):
            convert(temp_dir / "missing.tsv", target, registry=registry)

        assert not target.exists()
        assert registry.tags() == tags_before

    def test_labels_survive_conversion(self, temp_dir, labelled_df):
        source = export_file(labelled_df, temp_dir / "in.dta")
        target = convert(source, temp_dir / "out.csvy")

        df = import_file(target)
        meta = df.attrs["tabio"]["columns"]
        assert meta["sex"]["label"] == "Sex of respondent"
        assert meta["sex"]["value_labels"] == {1: "male", 2: "female"}
