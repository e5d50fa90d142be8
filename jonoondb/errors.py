"""Exception hierarchy and helpers for building error messages."""

from __future__ import annotations

import os


class JonoonDBError(Exception):
    """Base class of every error raised by the database."""


class InvalidArgumentError(JonoonDBError):
    """An argument passed to an operation is not valid."""


class MissingDatabaseFileError(JonoonDBError):
    """The database file does not exist."""


class MissingDatabaseFolderError(JonoonDBError):
    """The database folder does not exist."""


class OutOfMemoryError(JonoonDBError):
    """Memory could not be allocated."""


class DuplicateKeyError(JonoonDBError):
    """A key that must be unique already exists."""


class CollectionAlreadyExistError(JonoonDBError):
    """A collection with the same name already exists."""


class IndexAlreadyExistError(JonoonDBError):
    """An index with the same name already exists."""


class CollectionNotFoundError(JonoonDBError):
    """The requested collection does not exist."""


class InvalidSchemaError(JonoonDBError):
    """A document schema failed verification."""


class IndexOutOfBoundError(JonoonDBError):
    """An index was outside the bounds of a sequence."""


class SQLError(JonoonDBError):
    """The underlying SQL store reported an error."""


class FileIOError(JonoonDBError):
    """A file could not be opened, read or written."""


class ApiMisuseError(JonoonDBError):
    """The API was used in a way it does not allow."""


class MissingDocumentError(JonoonDBError):
    """A document with the requested id does not exist."""


def missing_field_error_string(field_name: str) -> str:
    """Message for a field that is absent from the parsed schema."""
    return f"Field definition for {field_name} not found in the parsed schema."


def invalid_struct_field_error_string(field_name: str, full_name: str) -> str:
    """Message for a path component that is not a struct field."""
    return (
        f"Field {field_name} is not of type struct. "
        f"Full name provided was {full_name}"
    )


def error_text(error_code: int) -> str:
    """Human readable text for an operating-system error code."""
    try:
        text = os.strerror(error_code)
    except (ValueError, OverflowError):
        return "Unknown error."
    return text or "Unknown error."