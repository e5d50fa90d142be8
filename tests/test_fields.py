import pytest

from jonoondb.fields import FieldType, field_type_name


@pytest.mark.parametrize(
    "field_type, name",
    [
        (FieldType.INT8, "INT8"),
        (FieldType.INT64, "INT64"),
        (FieldType.DOUBLE, "DOUBLE"),
        (FieldType.STRING, "STRING"),
        (FieldType.BLOB, "BLOB"),
    ],
)
def test_field_type_name(field_type, name):
    assert field_type_name(field_type) == name


def test_field_type_name_accepts_int():
    assert field_type_name(6) == "STRING"


def test_field_type_name_rejects_unknown():
    with pytest.raises(ValueError):
        field_type_name(42)


def test_names_follow_declaration_order():
    names = [field_type_name(t) for t in FieldType]
    assert names == [
        "INT8", "INT16", "INT32", "INT64", "FLOAT", "DOUBLE",
        "STRING", "VECTOR", "COMPLEX", "UNION", "BLOB",
    ]