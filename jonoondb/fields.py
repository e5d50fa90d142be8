"""Field types understood by the document layer."""

from __future__ import annotations

from enum import IntEnum


class FieldType(IntEnum):
    """Type of a field in a document schema."""

    INT8 = 0
    INT16 = 1
    INT32 = 2
    INT64 = 3
    FLOAT = 4
    DOUBLE = 5
    STRING = 6
    VECTOR = 7
    COMPLEX = 8
    UNION = 9
    BLOB = 10


def field_type_name(field_type: FieldType | int) -> str:
    """Upper-case name of a field type, e.g. ``"INT32"``."""
    return FieldType(field_type).name