"""File helpers: whole-file reads and preallocation of data files."""

from __future__ import annotations

import os

from .errors import FileIOError


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


def read_file(path: str | os.PathLike, binary: bool = True) -> bytes | str:
    """Read a whole file; bytes when ``binary`` is true, text otherwise."""
    try:
        handle = open(path, "rb") if binary else open(path, encoding="utf-8", newline="")
    except OSError as exc:
        raise FileIOError(
            f"Failed to open file at path {path}. Reason: {_reason(exc)}"
        ) from exc

    with handle:
        try:
            return handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            reason = _reason(exc) if isinstance(exc, OSError) else str(exc)
            raise FileIOError(
                f"Failed to read the file at path {path}. Reason: {reason}"
            ) from exc


def fast_allocate(path: str | os.PathLike, size: int) -> None:
    """Create a new file of ``size`` bytes; fails if the file already exists."""
    try:
        fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_EXCL, 0o644)
    except OSError as exc:
        raise FileIOError(
            f"Fast allocate for file {path} failed. Reason: {_reason(exc)}"
        ) from exc

    try:
        os.ftruncate(fd, size)
    except OSError as exc:
        os.close(fd)
        raise FileIOError(
            f"Fast allocate for file {path} failed. Reason: {_reason(exc)}"
        ) from exc

    try:
        os.close(fd)
    except OSError as exc:
        raise FileIOError(
            f"Fast allocate for file {path} failed. Reason: {_reason(exc)}"
        ) from exc