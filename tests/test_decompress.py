import zipfile

import pytest

from pminstall.decompress import unzip


def _make_zip(path, entries):
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            if data is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return path


@pytest.fixture
def dest(tmp_path):
    target = tmp_path / "out"
    target.mkdir()
    return target


def test_extracts_files_and_nested_directories(tmp_path, dest):
    archive = _make_zip(
        tmp_path / "a.zip",
        [("top.txt", b"top"), ("sub/inner/deep.dll", b"\x00\x01binary")],
    )
    assert unzip(archive, dest) is True
    assert (dest / "top.txt").read_bytes() == b"top"
    assert (dest / "sub" / "inner" / "deep.dll").read_bytes() == b"\x00\x01binary"


def test_directory_entries_are_created(tmp_path, dest):
    archive = _make_zip(tmp_path / "a.zip", [("docs/", None), ("docs/readme.txt", b"hi")])
    assert unzip(archive, dest) is True
    assert (dest / "docs").is_dir()
    assert (dest / "docs" / "readme.txt").read_text() == "hi"


def test_empty_directory_entry(tmp_path, dest):
    archive = _make_zip(tmp_path / "a.zip", [("empty/", None)])
    assert unzip(archive, dest) is True
    assert (dest / "empty").is_dir()
    assert list((dest / "empty").iterdir()) == []


def test_large_file_round_trip(tmp_path, dest):
    data = bytes(range(256)) * 100
    archive = _make_zip(tmp_path / "a.zip", [("big.bin", data)])
    assert unzip(archive, dest) is True
    assert (dest / "big.bin").read_bytes() == data


def test_existing_file_is_overwritten(tmp_path, dest):
    (dest / "f.txt").write_bytes(b"old contents")
    archive = _make_zip(tmp_path / "a.zip", [("f.txt", b"new")])
    assert unzip(archive, dest) is True
    assert (dest / "f.txt").read_bytes() == b"new"


def test_missing_archive(tmp_path, dest):
    assert unzip(tmp_path / "absent.zip", dest) is False


def test_not_a_zip(tmp_path, dest):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"this is not a zip archive")
    assert unzip(bogus, dest) is False


def test_empty_archive(tmp_path, dest):
    archive = _make_zip(tmp_path / "empty.zip", [])
    assert unzip(archive, dest) is False


def test_entry_escaping_destination(tmp_path, dest):
    archive = _make_zip(tmp_path / "evil.zip", [("../evil.txt", b"bad")])
    assert unzip(archive, dest) is False
    assert not (tmp_path / "evil.txt").exists()


def test_unwritable_output_fails(tmp_path, dest):
    (dest / "blocked").mkdir()
    archive = _make_zip(tmp_path / "a.zip", [("blocked", b"data")])
    assert unzip(archive, dest) is False