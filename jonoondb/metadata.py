"""Persistent catalogue of a database's collections, their indexes and data files."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from .errors import (
    CollectionAlreadyExistError,
    IndexAlreadyExistError,
    InvalidArgumentError,
    JonoonDBError,
    MissingDatabaseFileError,
    MissingDatabaseFolderError,
    SQLError,
)
from .filename_manager import FileInfo
from .index_info import IndexInfo, SchemaType, to_index_type, to_schema_type

_CREATE_COLLECTION = (
    "CREATE TABLE IF NOT EXISTS Collection ("
    "CollectionName TEXT PRIMARY KEY, "
    "CollectionSchema BLOB, "
    "CollectionSchemaType INT)"
)
_CREATE_COLLECTION_INDEX = (
    "CREATE TABLE IF NOT EXISTS CollectionIndex ("
    "CollectionName TEXT, "
    "IndexName TEXT, "
    "IndexType INT, "
    "BinData BLOB, "
    "PRIMARY KEY (CollectionName, IndexName))"
)
_CREATE_DATA_FILE = (
    "CREATE TABLE IF NOT EXISTS CollectionDataFile ("
    "CollectionName Text,"
    "FileKey INT, "
    "FileName TEXT, "
    "FileDataLength INT, "
    "PRIMARY KEY (CollectionName, FileKey))"
)
_INSERT_INDEX = (
    "INSERT INTO CollectionIndex (CollectionName, IndexName, IndexType, "
    "BinData) VALUES (?, ?, ?, ?)"
)
_INSERT_COLLECTION = (
    "INSERT INTO Collection (CollectionName, CollectionSchema, "
    "CollectionSchemaType) VALUES (?, ?, ?)"
)
_SELECT_COLLECTIONS = (
    "SELECT c.CollectionName, c.CollectionSchema, c.CollectionSchemaType, "
    "ci.IndexName, ci.IndexType, ci.BinData "
    "FROM Collection c LEFT JOIN CollectionIndex ci ON c.CollectionName = "
    "ci.CollectionName "
    "ORDER BY c.CollectionName;"
)
_SELECT_DATA_FILES = (
    "SELECT c.CollectionName, "
    "cdf.FileKey, cdf.FileName, cdf.FileDataLength "
    "FROM Collection c LEFT JOIN CollectionDataFile cdf ON "
    "c.CollectionName = cdf.CollectionName "
    "ORDER BY c.CollectionName, cdf.FileKey;"
)

SchemaLike = Union[bytes, bytearray, memoryview, str]


@dataclass
class CollectionMetadata:
    """Everything the catalogue records about one collection."""

    name: str = ""
    schema: bytes = b""
    schema_type: SchemaType = SchemaType.FLAT_BUFFERS
    indexes: list[IndexInfo] = field(default_factory=list)
    data_files: list[FileInfo] = field(default_factory=list)


def _index_info_to_bytes(info: IndexInfo) -> bytes:
    return json.dumps(
        {
            "name": info.name,
            "type": int(info.type),
            "column_name": info.column_name,
            "is_ascending": bool(info.is_ascending),
        },
        sort_keys=True,
    ).encode("utf-8")


def _bytes_to_index_info(data: bytes) -> IndexInfo:
    try:
        fields = json.loads(bytes(data).decode("utf-8"))
        return IndexInfo(
            name=str(fields["name"]),
            type=to_index_type(int(fields["type"])),
            column_name=str(fields["column_name"]),
            is_ascending=bool(fields["is_ascending"]),
        )
    except (ValueError, KeyError, TypeError) as exc:
        raise JonoonDBError(f"Stored index information is corrupt: {exc}") from exc


def _schema_bytes(schema: SchemaLike) -> bytes:
    if isinstance(schema, str):
        return schema.encode("utf-8")
    return bytes(schema)


class DatabaseMetadataManager:
    """Reads and writes the catalogue kept in ``<db_path>/<db_name>.dat``."""

    def __init__(
        self, db_path: str, db_name: str, create_db_if_missing: bool = False
    ) -> None:
        if not db_path:
            raise InvalidArgumentError("Argument dbPath is empty.")
        if not db_name:
            raise InvalidArgumentError("Argument dbName is empty.")

        folder = Path(db_path).expanduser()
        if not folder.exists():
            raise MissingDatabaseFolderError(
                f"Database folder {folder.as_posix()} does not exist."
            )
        db_file = folder / f"{db_name}.dat"
        if not db_file.exists() and not create_db_if_missing:
            raise MissingDatabaseFileError(
                f"Database file {db_file.as_posix()} does not exist."
            )

        posix = folder.as_posix()
        self.db_path = posix if posix.endswith("/") else posix + "/"
        self.db_name = db_name
        self.full_db_path = db_file.as_posix()

        try:
            self._conn = sqlite3.connect(
                self.full_db_path,
                timeout=30.0,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

        try:
            self._conn.execute("PRAGMA synchronous = FULL;")
            self._conn.execute("PRAGMA journal_mode = WAL;")
            self._conn.execute(_CREATE_COLLECTION)
            self._conn.execute(_CREATE_COLLECTION_INDEX)
            self._conn.execute(_CREATE_DATA_FILE)
        except sqlite3.Error as exc:
            self._conn.close()
            raise SQLError(str(exc)) from exc

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except sqlite3.Error:
            pass

    def _create_index(self, collection_name: str, info: IndexInfo) -> None:
        try:
            self._conn.execute(
                _INSERT_INDEX,
                (
                    collection_name,
                    info.name,
                    int(info.type),
                    _index_info_to_bytes(info),
                ),
            )
        except sqlite3.IntegrityError as exc:
            raise IndexAlreadyExistError(
                f"Index with name {info.name} already exists."
            ) from exc
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

    def add_collection(
        self,
        name: str,
        schema_type: SchemaType,
        schema: SchemaLike,
        indexes: Iterable[IndexInfo] = (),
    ) -> None:
        """Record a new collection and its indexes in one transaction."""
        schema_type = to_schema_type(int(schema_type))
        try:
            self._conn.execute("BEGIN")
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

        try:
            self._conn.execute(
                _INSERT_COLLECTION, (name, _schema_bytes(schema), int(schema_type))
            )
        except sqlite3.IntegrityError as exc:
            self._rollback()
            raise CollectionAlreadyExistError(
                f'Collection with name "{name}" already exists.'
            ) from exc
        except sqlite3.Error as exc:
            self._rollback()
            raise SQLError(str(exc)) from exc

        try:
            for info in indexes:
                self._create_index(name, info)
        except BaseException:
            self._rollback()
            raise

        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback()
            raise SQLError(str(exc)) from exc

    def existing_collections(self) -> list[CollectionMetadata]:
        """All recorded collections, ordered by name, with indexes and data files."""
        collections: list[CollectionMetadata] = []
        try:
            rows = self._conn.execute(_SELECT_COLLECTIONS).fetchall()
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

        for name, schema, schema_type, index_name, _index_type, bin_data in rows:
            if not collections or collections[-1].name != name:
                collections.append(
                    CollectionMetadata(
                        name=name,
                        schema=bytes(schema or b""),
                        schema_type=to_schema_type(int(schema_type)),
                    )
                )
            if index_name:
                collections[-1].indexes.append(
                    _bytes_to_index_info(bytes(bin_data or b""))
                )

        if not collections:
            return collections

        try:
            rows = self._conn.execute(_SELECT_DATA_FILES).fetchall()
        except sqlite3.Error as exc:
            raise SQLError(str(exc)) from exc

        index = 0
        for name, file_key, file_name, data_length in rows:
            if collections[index].name != name:
                index += 1
                if index >= len(collections):
                    raise JonoonDBError(
                        "Error occured while trying to read data files for "
                        f"collection {name}. CollectionDataFiles have no "
                        "corresponding collection."
                    )
                if collections[index].name != name:
                    raise JonoonDBError(
                        "Error occured while tring to read data files for "
                        f"collection {collections[index].name}. The sort order "
                        "of vector and sql resultset is not same."
                    )
            if file_name:
                collections[index].data_files.append(
                    FileInfo(
                        file_key=int(file_key),
                        file_name=file_name,
                        file_name_with_path=self.db_path + file_name,
                        data_length=int(data_length),
                    )
                )
        return collections

    def close(self) -> None:
        """Close the connection to the catalogue."""
        self._conn.close()

    def __enter__(self) -> DatabaseMetadataManager:
        return self

    def __exit__(self, *args) -> None:
        self.close()