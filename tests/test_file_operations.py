import os

import pytest

from utils.file_operations import ensure_directory, load_file_content, save_file_atomic


def test_save_file_atomic_replaces_content(tmp_path):
    target = tmp_path / "key"
    target.write_bytes(b"old")

    save_file_atomic(str(target), b"new")

    assert target.read_bytes() == b"new"
    assert os.listdir(tmp_path) == ["key"]


def test_save_file_atomic_rejects_empty_content(tmp_path):
    with pytest.raises(ValueError):
        save_file_atomic(str(tmp_path / "key"), b"")

    assert os.listdir(tmp_path) == []


def test_failed_atomic_write_removes_temp_file_and_keeps_target(tmp_path, monkeypatch):
    target = tmp_path / "key"
    target.write_bytes(b"old")

    def failing_replace(source, destination):
        raise OSError("disk full")

    monkeypatch.setattr("utils.file_operations.os.replace", failing_replace)

    with pytest.raises(OSError, match="disk full"):
        save_file_atomic(str(target), b"new")

    assert os.listdir(tmp_path) == ["key"]
    assert target.read_bytes() == b"old"


def test_load_file_content_of_missing_file(tmp_path):
    assert load_file_content(str(tmp_path / "missing")) is None


def test_ensure_directory_rejects_file(tmp_path):
    path = tmp_path / "file"
    path.write_text("x")

    with pytest.raises(NotADirectoryError):
        ensure_directory(str(path))
