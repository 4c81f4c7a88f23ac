"""Unit tests for the export engine."""

import gzip
import tarfile
import zipfile
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from tabio.core.exceptions import (
    ExportError,
    HandlerDirectionUnavailableError,
    HandlerExecutionError,
    UnrecognizedFormatError,
)
from tabio.io.exporter import Exporter, export_file, export_list
from tabio.io.importer import import_file


class TestExportFile:
    """Test export_file."""

    def test_csv(self, temp_dir, sample_df):
        target = temp_dir / "out.csv"
        written = export_file(sample_df, target)

        assert written == target
        assert target.read_text().splitlines() == ["a,b,c", "1,x,1.5", "2,y,2.5", "3,z,3.5"]

    def test_no_temporary_files_left(self, temp_dir, sample_df):
        export_file(sample_df, temp_dir / "out.tsv")
        assert [p.name for p in temp_dir.iterdir()] == ["out.tsv"]

    def test_creates_parent_directory(self, temp_dir, sample_df):
        target = temp_dir / "nested" / "dir" / "out.json"
        assert export_file(sample_df, target).exists()

    def test_string_path_returns_path(self, temp_dir, sample_df):
        written = export_file(sample_df, str(temp_dir / "out.csv"))
        assert isinstance(written, Path)

    def test_explicit_format(self, temp_dir, sample_df):
        target = temp_dir / "out.txt"
        export_file(sample_df, target, format="psv")
        assert target.read_text().splitlines()[0] == "a|b|c"

    def test_options_passed_to_handler(self, temp_dir, sample_df):
        target = temp_dir / "out.csv"
        export_file(sample_df, target, columns=["a"])
        assert target.read_text().splitlines()[0] == "a"

    def test_gzip(self, temp_dir, sample_df):
        target = temp_dir / "out.csv.gz"
        export_file(sample_df, target)

        with gzip.open(target, "rt") as f:
            assert f.readline().strip() == "a,b,c"
        assert [p.name for p in temp_dir.iterdir()] == ["out.csv.gz"]

    def test_zip_member_named_after_inner_file(self, temp_dir, sample_df):
        target = temp_dir / "out.tsv.zip"
        export_file(sample_df, target)

        with zipfile.ZipFile(target) as zf:
            assert zf.namelist() == ["out.tsv"]
            assert zf.read("out.tsv").decode().startswith("a\tb\tc")

    def test_tar(self, temp_dir, sample_df):
        target = temp_dir / "out.csv.tar"
        export_file(sample_df, target)
        with tarfile.open(target) as tf:
            assert tf.getnames() == ["out.csv"]

    def test_compressed_round_trip(self, temp_dir, sample_df):
        target = export_file(sample_df, temp_dir / "out.csv.xz")
        pd.testing.assert_frame_equal(import_file(target), sample_df, check_dtype=False)

    def test_bare_archive_needs_format(self, temp_dir, sample_df):
        with pytest.raises(ExportError, match="format="):
            export_file(sample_df, temp_dir / "out.zip")

    def test_bare_archive_with_format(self, temp_dir, sample_df):
        target = export_file(sample_df, temp_dir / "out.zip", format="csv")
        with zipfile.ZipFile(target) as zf:
            assert zf.namelist() == ["out"]

    def test_unknown_format(self, temp_dir, sample_df):
        with pytest.raises(UnrecognizedFormatError):
            export_file(sample_df, temp_dir / "out.unknownext")

    def test_import_only_format(self, temp_dir, sample_df):
        with pytest.raises(HandlerDirectionUnavailableError):
            export_file(sample_df, temp_dir / "out.xls")
        assert list(temp_dir.iterdir()) == []

    def test_failed_export_leaves_no_partial_file(self, temp_dir, sample_df, registry):
        def half_write(df, path, **options):
            with open(path, "w") as f:
                f.write("partial")
            raise OSError("disk full")

        registry.register("half", export_fn=half_write)
        target = temp_dir / "out.half"

        with pytest.raises(HandlerExecutionError) as exc_info:
            export_file(sample_df, target, registry=registry)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert list(temp_dir.iterdir()) == []

    def test_failed_export_keeps_existing_target(self, temp_dir, sample_df, registry):
        def broken(df, path, **options):
            raise ValueError("nope")

        registry.register("half", export_fn=broken)
        target = temp_dir / "out.half"
        target.write_text("previous")

        with pytest.raises(HandlerExecutionError):
            export_file(sample_df, target, registry=registry)
        assert target.read_text() == "previous"

    def test_failed_export_removes_created_directories(self, temp_dir, sample_df, registry):
        def broken(df, path, **options):
            raise ValueError("nope")

        registry.register("half", export_fn=broken)
        (temp_dir / "existing").mkdir()
        target = temp_dir / "existing" / "new" / "deeper" / "out.half"

        with pytest.raises(HandlerExecutionError):
            export_file(sample_df, target, registry=registry)
        assert list(temp_dir.iterdir()) == [temp_dir / "existing"]
        assert list((temp_dir / "existing").iterdir()) == []

    def test_column_dict_is_converted(self, temp_dir):
        target = export_file({"x": [1, 2], "y": ["a", "b"]}, temp_dir / "out.csv")
        assert target.read_text().splitlines() == ["x,y", "1,a", "2,b"]

    def test_unconvertible_input(self, temp_dir):
        with pytest.raises(ExportError):
            export_file(42, temp_dir / "out.csv")

    def test_several_tables_to_single_table_format(self, temp_dir, sample_df):
        with pytest.raises(ExportError, match="single table"):
            export_file({"a": sample_df, "b": sample_df}, temp_dir / "out.csv")
        with pytest.raises(ExportError):
            export_file([sample_df, sample_df], temp_dir / "out.csv")

    def test_clipboard(self, sample_df):
        with patch.object(pd.DataFrame, "to_clipboard") as mock_to_clipboard:
            assert export_file(sample_df, "clipboard") == "clipboard"
        mock_to_clipboard.assert_called_once_with(index=False, excel=True)

    def test_clipboard_with_explicit_format(self, temp_dir, sample_df, monkeypatch):
        monkeypatch.chdir(temp_dir)
        with patch.object(pd.DataFrame, "to_clipboard") as mock_to_clipboard:
            assert export_file(sample_df, "clipboard", format="csv") == "clipboard"
        mock_to_clipboard.assert_called_once()
        assert list(temp_dir.iterdir()) == []


class TestMultiTableExport:
    """Test exporting several tables to one workbook or document."""

    def test_workbook_keeps_order(self, temp_dir, sample_df):
        pytest.importorskip("openpyxl")
        first = sample_df
        second = pd.DataFrame({"z": [10, 20]})
        target = export_file({"first": first, "second": second}, temp_dir / "book.xlsx")

        assert pd.ExcelFile(target).sheet_names == ["first", "second"]
        pd.testing.assert_frame_equal(pd.read_excel(target, sheet_name="second"), second)

    def test_list_names_sheets(self, temp_dir, sample_df):
        pytest.importorskip("openpyxl")
        target = export_file([sample_df, sample_df], temp_dir / "book.xlsx")
        assert pd.ExcelFile(target).sheet_names == ["Sheet1", "Sheet2"]

    def test_single_frame_to_workbook(self, temp_dir, sample_df):
        pytest.importorskip("openpyxl")
        target = export_file(sample_df, temp_dir / "book.xlsx")
        assert pd.ExcelFile(target).sheet_names == ["Sheet1"]

    def test_duplicate_truncated_sheet_names(self, temp_dir, sample_df):
        pytest.importorskip("openpyxl")
        tables = {"x" * 40: sample_df, "x" * 35: sample_df}
        with pytest.raises(ExportError, match="unique"):
            export_file(tables, temp_dir / "book.xlsx")
        assert list(temp_dir.iterdir()) == []


class TestExportList:
    """Test export_list."""

    def test_name_pattern(self, temp_dir, sample_df):
        pattern = str(temp_dir / "{name}.csv")
        written = export_list({"one": sample_df, "two": sample_df.head(1)}, pattern)

        assert [p.name for p in written] == ["one.csv", "two.csv"]
        assert len(import_file(written[1])) == 1

    def test_index_pattern(self, temp_dir, sample_df):
        written = export_list([sample_df, sample_df], str(temp_dir / "part{index}.tsv"))
        assert [p.name for p in written] == ["part1.tsv", "part2.tsv"]

    def test_explicit_names(self, temp_dir, sample_df):
        written = export_list(
            {"one": sample_df, "two": sample_df},
            [temp_dir / "a.json", temp_dir / "b.csv.gz"],
        )
        assert [p.name for p in written] == ["a.json", "b.csv.gz"]

    def test_name_count_mismatch(self, temp_dir, sample_df):
        with pytest.raises(ExportError, match="2 tables"):
            export_list({"one": sample_df, "two": sample_df}, [temp_dir / "a.csv"])

    def test_pattern_without_placeholder(self, temp_dir, sample_df):
        with pytest.raises(ExportError):
            export_list({"one": sample_df, "two": sample_df}, str(temp_dir / "same.csv"))

    def test_requires_tables(self, temp_dir, sample_df):
        with pytest.raises(ExportError):
            export_list(sample_df, str(temp_dir / "{name}.csv"))

    def test_exporter_class(self, temp_dir, sample_df, registry):
        exporter = Exporter(registry)
        assert exporter.export_file(sample_df, temp_dir / "out.csv").exists()
