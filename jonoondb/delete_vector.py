"""Persistent record of deleted document ids for one collection."""

from __future__ import annotations

import sqlite3
import struct
from pathlib import Path

from .errors import (
    InvalidArgumentError,
    JonoonDBError,
    MissingDatabaseFileError,
    MissingDatabaseFolderError,
    SQLError,
)

_BITMAP_TYPE = 1
_VERSION = 1

_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS CollectionDeleteVector ("
    "CollectionName TEXT PRIMARY KEY,"
    "DeleteVectorType INT,"
    "Version INT,"
    "DeleteVectorData BLOB)"
)
_COUNT = "SELECT COUNT(*) FROM CollectionDeleteVector WHERE CollectionName = ?"
_INSERT_EMPTY = (
    "INSERT INTO CollectionDeleteVector (CollectionName, "
    "DeleteVectorType, Version, DeleteVectorData) VALUES "
    "(?, ?, 1, NULL)"
)
_UPDATE = (
    "UPDATE CollectionDeleteVector "
    "SET DeleteVectorType = ?, "
    "DeleteVectorData = ? "
    "WHERE CollectionName = ?"
)
_SELECT = (
    "SELECT DeleteVectorType, Version, DeleteVectorData "
    "FROM CollectionDeleteVector "
    "WHERE CollectionName = ?"
)


def _serialize(ids: set[int]) -> bytes:
    ordered = sorted(ids)
    return struct.pack(f"<{len(ordered)}Q", *ordered)


def _deserialize(bitmap_type: int, version: int, data: bytes) -> set[int]:
    if bitmap_type != _BITMAP_TYPE or version != _VERSION:
        raise JonoonDBError(
            f"Unsupported delete vector type {bitmap_type} with version {version}."
        )
    if len(data) % 8:
        raise JonoonDBError("Delete vector data is corrupt.")
    return set(struct.unpack(f"<{len(data) // 8}Q", data))


def _connect(db_path: str, db_name: str, create_db_if_missing: bool) -> sqlite3.Connection:
    folder = Path(db_path)
    if not folder.exists():
        raise MissingDatabaseFolderError(
            f"Database folder {folder.as_posix()} does not exist."
        )
    db_file = folder / f"{db_name}.dat"
    if not db_file.exists() and not create_db_if_missing:
        raise MissingDatabaseFileError(
            f"Database file {db_file.as_posix()} does not exist."
        )
    try:
        return sqlite3.connect(
            db_file.as_posix(),
            timeout=30.0,
            isolation_level=None,
            check_same_thread=False,
        )
    except sqlite3.Error as exc:
        raise SQLError(str(exc)) from exc


class DeleteVector:
    """Tracks which document ids of a collection are deleted, and persists them."""

    def __init__(
        self,
        db_path: str,
        db_name: str,
        collection_name: str,
        create_db_if_missing: bool = False,
        next_document_id: int = 0,
    ) -> None:
        self.collection_name = collection_name
        self._next_document_id = next_document_id
        self._deleted: set[int] = set()
        self._live: frozenset[int] | None = None
        self._conn = _connect(db_path, db_name, create_db_if_missing)
        try:
            self._conn.execute(_CREATE_TABLE)
            (count,) = self._conn.execute(_COUNT, (collection_name,)).fetchone()
            if count == 0:
                self._conn.execute(_INSERT_EMPTY, (collection_name, _BITMAP_TYPE))
            else:
                self._load()
        except sqlite3.Error as exc:
            self._conn.close()
            raise SQLError(str(exc)) from exc
        except BaseException:
            self._conn.close()
            raise

    @property
    def next_document_id(self) -> int:
        """Id the next inserted document will get."""
        return self._next_document_id

    @property
    def deleted_ids(self) -> frozenset[int]:
        """Ids of the deleted documents."""
        return frozenset(self._deleted)

    def _load(self) -> None:
        row = self._conn.execute(_SELECT, (self.collection_name,)).fetchone()
        if row is None:
            raise JonoonDBError(
                f"Bitmap not found for collection {self.collection_name}."
            )
        bitmap_type, version, data = row
        if data is not None:
            self._deleted = _deserialize(bitmap_type, version, bytes(data))

    def _store(self) -> None:
        try:
            self._conn.execute(
                _UPDATE,
                (_BITMAP_TYPE, _serialize(self._deleted), self.collection_name),
            )
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

    def on_document_deleted(self, doc_id: int) -> None:
        """Mark a document as deleted and persist the change."""
        if not 0 <= doc_id < self._next_document_id:
            raise InvalidArgumentError(
                f"Document id {doc_id} is out of range; next document id is "
                f"{self._next_document_id}."
            )
        if doc_id in self._deleted:
            raise InvalidArgumentError(f"Document id {doc_id} is already deleted.")

        self._deleted.add(doc_id)
        try:
            self._store()
        except BaseException:
            self._deleted.discard(doc_id)
            raise
        self._live = None

    def on_documents_inserted(self, next_document_id: int) -> None:
        """Note that documents were added, up to (not including) ``next_document_id``."""
        if next_document_id <= self._next_document_id:
            raise InvalidArgumentError(
                f"Argument next_document_id {next_document_id} must be greater "
                f"than {self._next_document_id}."
            )
        self._next_document_id = next_document_id
        self._live = None

    def live_ids(self) -> frozenset[int]:
        """Ids of all documents that exist and are not deleted."""
        if self._live is None:
            self._live = frozenset(range(self._next_document_id)) - self._deleted
        return self._live

    def close(self) -> None:
        """Close the connection to the store."""
        self._conn.close()

    def __enter__(self) -> DeleteVector:
        return self

    def __exit__(self, *args) -> None:
        self.close()