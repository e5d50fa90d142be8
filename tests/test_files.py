import os

import pytest

from jonoondb.errors import FileIOError
from jonoondb.files import fast_allocate, read_file


def test_read_binary_round_trip(tmp_path):
    path = tmp_path / "data.bin"
    payload = bytes(range(256)) * 3
    path.write_bytes(payload)
    assert read_file(path) == payload


def test_read_text(tmp_path):
    path = tmp_path / "data.txt"
    path.write_bytes(b"line one\nline two\n")
    assert read_file(path, binary=False) == "line one\nline two\n"


def test_read_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    assert read_file(path) == b""


def test_read_missing_file(tmp_path):
    path = tmp_path / "missing"
    with pytest.raises(FileIOError, match="Failed to open file at path"):
        read_file(path)


def test_fast_allocate_sets_size(tmp_path):
    path = tmp_path / "alloc"
    fast_allocate(path, 4096)
    assert os.path.getsize(path) == 4096
    assert read_file(path) == b"\x00" * 4096


def test_fast_allocate_refuses_existing_file(tmp_path):
    path = tmp_path / "existing"
    path.write_bytes(b"keep me")
    with pytest.raises(FileIOError, match="Fast allocate for file"):
        fast_allocate(path, 1024)
    assert path.read_bytes() == b"keep me"