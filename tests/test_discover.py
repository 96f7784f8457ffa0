"""Tests for FCStd discovery and preview naming."""

from pathlib import Path

import pytest

from fcstd_preview.errors import DiscoveryError
from fcstd_preview.ingest.discover import discover_fcstd_files, is_fcstd_file, preview_path_for


def test_discovers_recursively_case_insensitive_in_lexical_order(tmp_path, make_fcstd):
    """All extension spellings are found, sorted by path."""
    make_fcstd(tmp_path / "b.FCStd")
    make_fcstd(tmp_path / "a.fcstd")
    make_fcstd(tmp_path / "sub" / "c.FCSTD")
    (tmp_path / "notes.txt").write_text("x")
    (tmp_path / "a-preview.png").write_bytes(b"png")

    found = discover_fcstd_files(tmp_path)

    assert found == sorted([tmp_path / "a.fcstd", tmp_path / "b.FCStd", tmp_path / "sub" / "c.FCSTD"])


def test_directories_with_fcstd_suffix_are_skipped(tmp_path, make_fcstd):
    """Only regular files are candidates."""
    (tmp_path / "folder.FCStd").mkdir()
    make_fcstd(tmp_path / "folder.FCStd" / "inner.FCStd")

    assert discover_fcstd_files(tmp_path) == [tmp_path / "folder.FCStd" / "inner.FCStd"]


def test_empty_directory_finds_nothing(tmp_path):
    assert discover_fcstd_files(tmp_path) == []


def test_missing_root_is_fatal(tmp_path):
    """A root that does not exist cannot be enumerated."""
    with pytest.raises(DiscoveryError):
        discover_fcstd_files(tmp_path / "absent")


def test_file_root_is_fatal(tmp_path, make_fcstd):
    archive = make_fcstd(tmp_path / "cube.FCStd")

    with pytest.raises(DiscoveryError) as exc_info:
        discover_fcstd_files(archive)

    assert exc_info.value.kind == "discovery_failed"


@pytest.mark.parametrize(
    ("archive", "expected"),
    [
        ("/models/cube.FCStd", "/models/cube-preview.png"),
        ("/models/cube.fcstd", "/models/cube-preview.png"),
        ("/models/cube.FCSTD", "/models/cube-preview.png"),
        ("/models/part.v2.FCStd", "/models/part.v2-preview.png"),
        ("relative/dir/bracket.FCStd", "relative/dir/bracket-preview.png"),
    ],
)
def test_preview_path_strips_final_extension(archive, expected):
    """The preview sits beside the archive with the final extension replaced."""
    assert preview_path_for(Path(archive)) == Path(expected)


def test_is_fcstd_file():
    assert is_fcstd_file(Path("x.FCStd"))
    assert is_fcstd_file(Path("x.fcstd"))
    assert not is_fcstd_file(Path("x.zip"))
    assert not is_fcstd_file(Path("x.FCStd1"))
