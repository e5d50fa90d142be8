"""Bookkeeping of the data files that hold a collection's blobs."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from .errors import (
    InvalidArgumentError,
    JonoonDBError,
    MissingDatabaseFileError,
    MissingDatabaseFolderError,
    SQLError,
)

_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS CollectionDataFile ("
    "CollectionName Text,"
    "FileKey INT, "
    "FileName TEXT, "
    "FileDataLength INT, "
    "PRIMARY KEY (CollectionName, FileKey))"
)
_INSERT = (
    "INSERT INTO CollectionDataFile (CollectionName, FileKey, FileName, "
    "FileDataLength) VALUES (?, ?, ?, ?)"
)
_SELECT_NAME = (
    "SELECT FileName FROM CollectionDataFile WHERE CollectionName = ? AND "
    "FileKey = ?"
)
_SELECT_LAST = (
    "SELECT FileKey, FileDataLength "
    "FROM CollectionDataFile "
    "WHERE CollectionName = ? "
    "ORDER BY FileKey DESC LIMIT 1"
)
_UPDATE_LENGTH = (
    "UPDATE CollectionDataFile SET FileDataLength = ? WHERE CollectionName = "
    "? AND FileKey = ?"
)


@dataclass
class FileInfo:
    """Location and fill level of one data file."""

    file_key: int = 0
    file_name: str = ""
    file_name_with_path: str = ""
    data_length: int = -1


class FileNameManager:
    """Allocates data file names for a collection and records their lengths."""

    def __init__(
        self,
        db_path: str,
        db_name: str,
        collection_name: str,
        create_db_if_missing: bool = False,
    ) -> None:
        if not db_path:
            raise InvalidArgumentError("Argument dbPath is empty.")
        if not db_name:
            raise InvalidArgumentError("Argument dbName is empty.")

        self.collection_name = collection_name
        self.db_name = db_name
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._cache: dict[int, FileInfo] = {}

        if not self.db_path.exists():
            raise MissingDatabaseFolderError(
                f"Database folder {self.db_path.as_posix()} does not exist."
            )

        db_file = self.db_path / f"{db_name}.dat"
        if not db_file.exists() and not create_db_if_missing:
            raise MissingDatabaseFileError(
                f"Database file {db_file.as_posix()} does not exist."
            )

        try:
            self._conn = sqlite3.connect(
                db_file.as_posix(),
                timeout=30.0,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

        try:
            self._conn.execute("PRAGMA journal_mode = WAL;")
            self._conn.execute(_CREATE_TABLE)
        except sqlite3.Error as exc:
            self._conn.close()
            raise SQLError(str(exc)) from exc

    def _make_info(self, file_key: int, data_length: int) -> FileInfo:
        name = f"{self.db_name}_{self.collection_name}.{file_key}"
        return FileInfo(
            file_key=file_key,
            file_name=name,
            file_name_with_path=(self.db_path / name).as_posix(),
            data_length=data_length,
        )

    def _last_row(self) -> tuple[int, int] | None:
        try:
            return self._conn.execute(_SELECT_LAST, (self.collection_name,)).fetchone()
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

    def _add_file_record(self, file_key: int, file_name: str) -> None:
        try:
            self._conn.execute(
                _INSERT, (self.collection_name, file_key, file_name, -1)
            )
        except sqlite3.IntegrityError as exc:
            raise JonoonDBError(
                f"The specified file key '{file_key}' already exists for "
                f"collection '{self.collection_name}'."
            ) from exc
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

    def current_data_file_info(self, create_if_missing: bool = False) -> FileInfo:
        """Info of the newest data file, creating the first one if asked to."""
        with self._lock:
            row = self._last_row()
            if row is None:
                if not create_if_missing:
                    raise JonoonDBError(
                        "Cannot get the current FileInfo because there are no "
                        "FileInfo records in the database."
                    )
                info = self._make_info(0, -1)
                self._add_file_record(info.file_key, info.file_name)
                return info
            file_key, data_length = row
            return self._make_info(int(file_key), int(data_length))

    def next_data_file_info(self) -> FileInfo:
        """Register and return the data file that follows the newest one."""
        with self._lock:
            row = self._last_row()
            if row is None:
                raise JonoonDBError(
                    "Cannot get the next FileInfo because there are no FileInfo "
                    "records in the database."
                )
            info = self._make_info(int(row[0]) + 1, -1)
            self._add_file_record(info.file_key, info.file_name)
            return info

    def update_data_file_length(self, file_key: int, length: int) -> None:
        """Record how many bytes of a data file hold data."""
        with self._lock:
            try:
                self._conn.execute(
                    _UPDATE_LENGTH, (length, self.collection_name, file_key)
                )
            except sqlite3.Error as exc:
                raise SQLError(str(exc)) from exc

    def file_info(self, file_key: int) -> FileInfo:
        """Info of the data file with the given key."""
        cached = self._cache.get(file_key)
        if cached is not None:
            return cached
        with self._lock:
            try:
                row = self._conn.execute(
                    _SELECT_NAME, (self.collection_name, file_key)
                ).fetchone()
            except sqlite3.Error as exc:
                raise SQLError(str(exc)) from exc
            if row is None:
                raise JonoonDBError(
                    f"Could not find FileInfo for FileKey {file_key} and "
                    f"CollectionName {self.collection_name}."
                )
            name = row[0]
            info = FileInfo(
                file_key=file_key,
                file_name=name,
                file_name_with_path=(self.db_path / name).as_posix(),
            )
            self._cache[file_key] = info
            return info

    def close(self) -> None:
        """Close the connection to the metadata store."""
        self._conn.close()

    def __enter__(self) -> FileNameManager:
        return self

    def __exit__(self, *args) -> None:
        self.close()