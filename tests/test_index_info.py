import pytest

from jonoondb.errors import InvalidArgumentError, JonoonDBError
from jonoondb.index_info import (
    IndexInfo,
    IndexType,
    SchemaType,
    to_index_type,
    to_schema_type,
)


def test_to_index_type_valid():
    assert to_index_type(1) is IndexType.INVERTED_COMPRESSED_BITMAP
    assert to_index_type(2) is IndexType.VECTOR


@pytest.mark.parametrize("value", [0, 3, -1])
def test_to_index_type_invalid(value):
    with pytest.raises(InvalidArgumentError, match="INVERTED_COMPRESSED_BITMAP = 1"):
        to_index_type(value)


def test_to_schema_type_valid():
    assert to_schema_type(1) is SchemaType.FLAT_BUFFERS


def test_to_schema_type_invalid_is_jonoondb_error():
    with pytest.raises(JonoonDBError, match="FLAT_BUFFERS = 1"):
        to_schema_type(2)


def test_index_info_fields_and_equality():
    info = IndexInfo("idx", IndexType.VECTOR, "a.b", False)
    assert info.name == "idx"
    assert info.column_name == "a.b"
    assert info.type is IndexType.VECTOR
    assert info.is_ascending is False
    assert info == IndexInfo("idx", IndexType.VECTOR, "a.b", False)


def test_index_info_is_mutable():
    info = IndexInfo()
    info.name = "renamed"
    info.column_name = "col"
    assert (info.name, info.column_name) == ("renamed", "col")