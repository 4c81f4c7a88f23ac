"""Unit tests for compression and archive helpers."""

import gzip
import tarfile
import zipfile

import pytest

from tabio.core.exceptions import ArchiveMemberError, SourceResolutionError
from tabio.io.archives import (
    compress_file,
    decompress_file,
    extract_member,
    is_archive,
    list_archive_members,
    select_member,
    strip_suffix,
)


class TestSelectMember:
    """Test archive member selection."""

    def test_single_member(self):
        assert select_member(["data.csv"], None, "a.zip") == "data.csv"

    def test_several_members_need_a_choice(self):
        with pytest.raises(ArchiveMemberError, match="member="):
            select_member(["a.csv", "b.csv"], None, "a.zip")

    def test_empty_archive(self):
        with pytest.raises(ArchiveMemberError, match="no files"):
            select_member([], None, "a.zip")

    def test_explicit_member(self):
        assert select_member(["a.csv", "b.csv"], "b.csv", "a.zip") == "b.csv"

    def test_member_by_base_name(self):
        assert select_member(["dir/a.csv", "dir/b.csv"], "b.csv", "a.zip") == "dir/b.csv"

    def test_missing_member(self):
        with pytest.raises(ArchiveMemberError, match="not found"):
            select_member(["a.csv"], "c.csv", "a.zip")


class TestArchives:
    """Test listing, extraction and compression."""

    def test_zip_members(self, temp_dir):
        path = temp_dir / "data.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("a.csv", "x\n1\n")
            zf.writestr("sub/", "")
            zf.writestr("sub/b.tsv", "x\n2\n")

        assert list_archive_members(path, "zip") == ["a.csv", "sub/b.tsv"]
        extracted = extract_member(path, "zip", "sub/b.tsv", temp_dir)
        assert extracted.name == "b.tsv"
        assert extracted.read_text() == "x\n2\n"

    def test_tar_members(self, temp_dir):
        source = temp_dir / "a.csv"
        source.write_text("x\n1\n")
        path = compress_file(source, temp_dir / "a.csv.tar", "tar")

        with tarfile.open(path) as tf:
            assert tf.getnames() == ["a.csv"]
        assert list_archive_members(path, "tar") == ["a.csv"]

        out_dir = temp_dir / "out"
        out_dir.mkdir()
        assert extract_member(path, "tar", "a.csv", out_dir).read_text() == "x\n1\n"

    def test_bad_archive(self, temp_dir):
        path = temp_dir / "broken.zip"
        path.write_bytes(b"not a zip")
        with pytest.raises(SourceResolutionError):
            list_archive_members(path, "zip")

    @pytest.mark.parametrize("compression", ["gz", "bz2", "xz"])
    def test_stream_compression(self, temp_dir, compression):
        source = temp_dir / "a.csv"
        source.write_text("x,y\n1,2\n")
        packed = compress_file(source, temp_dir / f"a.csv.{compression}", compression)

        restored = decompress_file(packed, compression, temp_dir / "restored.csv")
        assert restored.read_text() == "x,y\n1,2\n"

    def test_zip_member_named_after_inner_file(self, temp_dir):
        source = temp_dir / "tmp123"
        source.write_text("x\n")
        packed = compress_file(source, temp_dir / "out.csv.zip", "zip", arcname="out.csv")
        with zipfile.ZipFile(packed) as zf:
            assert zf.namelist() == ["out.csv"]

    def test_bad_gzip(self, temp_dir):
        path = temp_dir / "a.csv.gz"
        path.write_bytes(b"plain text")
        with pytest.raises(SourceResolutionError):
            decompress_file(path, "gz", temp_dir / "a.csv")

    def test_gzip_written_is_valid(self, temp_dir):
        source = temp_dir / "a.csv"
        source.write_text("x\n")
        packed = compress_file(source, temp_dir / "a.csv.gz", "gz")
        with gzip.open(packed, "rt") as f:
            assert f.read() == "x\n"


def test_is_archive():
    assert is_archive("zip")
    assert is_archive("tar")
    assert not is_archive("gz")
    assert not is_archive(None)


def test_strip_suffix():
    assert strip_suffix("data.csv.GZ", "gz") == "data.csv"
    assert strip_suffix("data.csv", "gz") == "data.csv"
