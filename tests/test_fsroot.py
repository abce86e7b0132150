import os

import pytest

from procmetrics.fsroot import PseudoFS


def test_nonexistent_mount_point_fails(tmp_path):
    with pytest.raises(FileNotFoundError, match="could not read"):
        PseudoFS(str(tmp_path / "foobar"))


def test_file_mount_point_fails(tmp_path):
    regular = tmp_path / "doc.go"
    regular.write_text("package fs\n")
    with pytest.raises(NotADirectoryError, match="is not a directory"):
        PseudoFS(str(regular))


def test_directory_mount_point_succeeds(tmp_path):
    fs = PseudoFS(str(tmp_path))
    assert fs.mount_point == str(tmp_path)


def test_accepts_path_like(tmp_path):
    fs = PseudoFS(tmp_path)
    assert fs.mount_point == str(tmp_path)
    assert os.fspath(fs) == str(tmp_path)


def test_path_joins_elements(tmp_path):
    fs = PseudoFS(str(tmp_path))
    assert fs.path("net", "ip_vs_stats") == os.path.join(str(tmp_path), "net", "ip_vs_stats")


def test_path_without_elements_is_mount_point(tmp_path):
    fs = PseudoFS(str(tmp_path))
    assert fs.path() == os.path.normpath(str(tmp_path))


def test_path_cleans_separators_and_dots(tmp_path):
    fs = PseudoFS(str(tmp_path))
    expected = os.path.join(str(tmp_path), "block", "stat")
    assert fs.path("block/", "./dm-0/..", "", "stat") == expected


def test_path_keeps_absolute_elements_under_root(tmp_path):
    fs = PseudoFS(str(tmp_path))
    assert fs.path("/devices/rbd") == os.path.join(str(tmp_path), "devices", "rbd")