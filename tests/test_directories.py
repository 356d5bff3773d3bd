import pytest

from pminstall.directories import create_directories


def test_creates_nested(tmp_path):
    target = tmp_path / "a" / "b" / "c"
    assert create_directories(target) is True
    assert target.is_dir()


def test_accepts_string_path(tmp_path):
    target = tmp_path / "x" / "y"
    assert create_directories(str(target)) is True
    assert target.is_dir()


def test_existing_returns_false(tmp_path):
    target = tmp_path / "exists"
    target.mkdir()
    assert create_directories(target) is False
    assert target.is_dir()


def test_existing_file_returns_false(tmp_path):
    target = tmp_path / "file"
    target.write_text("data")
    assert create_directories(target) is False
    assert target.is_file()


def test_parent_is_file_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("data")
    with pytest.raises(OSError):
        create_directories(blocker / "child")