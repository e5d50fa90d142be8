"""Index and schema descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidArgumentError


class IndexType(IntEnum):
    """Kinds of index a collection can hold."""

    INVERTED_COMPRESSED_BITMAP = 1
    VECTOR = 2


class SchemaType(IntEnum):
    """Kinds of document schema."""

    FLAT_BUFFERS = 1


@dataclass
class IndexInfo:
    """Description of an index on one column of a collection."""

    name: str = ""
    type: IndexType = IndexType.INVERTED_COMPRESSED_BITMAP
    column_name: str = ""
    is_ascending: bool = True


def to_index_type(value: int) -> IndexType:
    """Convert an integer to an :class:`IndexType`, rejecting unknown values."""
    try:
        return IndexType(value)
    except ValueError:
        raise InvalidArgumentError(
            "Argument type is not valid. Allowed values are "
            "{INVERTED_COMPRESSED_BITMAP = 1, VECTOR = 2}."
        ) from None


def to_schema_type(value: int) -> SchemaType:
    """Convert an integer to a :class:`SchemaType`, rejecting unknown values."""
    try:
        return SchemaType(value)
    except ValueError:
        raise InvalidArgumentError(
            "Argument type is not valid. Allowed values are {FLAT_BUFFERS = 1}."
        ) from None