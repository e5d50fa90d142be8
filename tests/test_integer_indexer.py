import pytest

from jonoondb.errors import InvalidArgumentError, JonoonDBError
from jonoondb.fields import FieldType
from jonoondb.index_info import IndexInfo, IndexType
from jonoondb.integer_indexer import (
    Constraint,
    IndexConstraintOperator as Op,
    IntegerBitmapIndexer,
    OperandType,
    is_valid_field_type,
)

VALUES = {0: 5, 1: 3, 2: 5, 3: 10, 4: -2}


def make_indexer(field_type=FieldType.INT64):
    info = IndexInfo("idx", IndexType.INVERTED_COMPRESSED_BITMAP, "a.b", True)
    return IntegerBitmapIndexer(info, field_type)


@pytest.fixture
def indexer():
    idx = make_indexer()
    for doc_id, value in VALUES.items():
        idx.insert(doc_id, value)
    return idx


def ic(op, value):
    return Constraint("a.b", op, OperandType.INTEGER, value)


def dc(op, value):
    return Constraint("a.b", op, OperandType.DOUBLE, value)


def expected(pred):
    return {d for d, v in VALUES.items() if pred(v)}


def test_valid_field_types():
    assert [t for t in FieldType if is_valid_field_type(t)] == [
        FieldType.INT8, FieldType.INT16, FieldType.INT32, FieldType.INT64,
    ]


def test_field_name_tokens(indexer):
    assert indexer.field_name_tokens == ["a", "b"]


@pytest.mark.parametrize(
    "info, message",
    [
        (IndexInfo("", IndexType.INVERTED_COMPRESSED_BITMAP, "c", True), "empty name"),
        (IndexInfo("i", IndexType.INVERTED_COMPRESSED_BITMAP, "", True), "empty column name"),
        (IndexInfo("i", IndexType.VECTOR, "c", True), "INVERTED_COMPRESSED_BITMAP"),
    ],
)
def test_constructor_rejects_bad_index_info(info, message):
    with pytest.raises(InvalidArgumentError, match=message):
        IntegerBitmapIndexer(info, FieldType.INT32)


def test_constructor_rejects_non_integer_field():
    with pytest.raises(InvalidArgumentError, match="fieldType DOUBLE is not valid"):
        make_indexer(FieldType.DOUBLE)


def test_equal(indexer):
    assert indexer.filter(ic(Op.EQUAL, 5)) == expected(lambda v: v == 5)
    assert indexer.filter(ic(Op.EQUAL, 7)) == set()
    assert indexer.filter(dc(Op.EQUAL, 5.0)) == expected(lambda v: v == 5)
    assert indexer.filter(dc(Op.EQUAL, 5.5)) == set()


def test_equal_with_string_operand_is_empty(indexer):
    c = Constraint("a.b", Op.EQUAL, OperandType.STRING, "5")
    assert indexer.filter(c) == set()


@pytest.mark.parametrize("value", [-3, 3, 5, 11])
def test_integer_comparisons(indexer, value):
    assert indexer.filter(ic(Op.LESS_THAN, value)) == expected(lambda v: v < value)
    assert indexer.filter(ic(Op.LESS_THAN_EQUAL, value)) == expected(lambda v: v <= value)
    assert indexer.filter(ic(Op.GREATER_THAN, value)) == expected(lambda v: v > value)
    assert indexer.filter(ic(Op.GREATER_THAN_EQUAL, value)) == expected(lambda v: v >= value)


@pytest.mark.parametrize("value", [-2.5, 3.0, 4.5, 5.0, 10.1])
def test_double_comparisons(indexer, value):
    assert indexer.filter(dc(Op.LESS_THAN, value)) == expected(lambda v: v < value)
    assert indexer.filter(dc(Op.LESS_THAN_EQUAL, value)) == expected(lambda v: v <= value)
    assert indexer.filter(dc(Op.GREATER_THAN, value)) == expected(lambda v: v > value)
    assert indexer.filter(dc(Op.GREATER_THAN_EQUAL, value)) == expected(lambda v: v >= value)


def test_match_is_rejected(indexer):
    with pytest.raises(JonoonDBError, match="IndexConstraintOperator type 64 is not valid"):
        indexer.filter(ic(Op.MATCH, 1))


@pytest.mark.parametrize(
    "lower, upper, pred",
    [
        (ic(Op.GREATER_THAN, 3), ic(Op.LESS_THAN_EQUAL, 10), lambda v: 3 < v <= 10),
        (ic(Op.GREATER_THAN_EQUAL, 3), ic(Op.LESS_THAN, 10), lambda v: 3 <= v < 10),
        (dc(Op.GREATER_THAN, 2.5), dc(Op.LESS_THAN_EQUAL, 5.0), lambda v: 2.5 < v <= 5.0),
        (dc(Op.GREATER_THAN_EQUAL, -2.5), dc(Op.LESS_THAN, 4.5), lambda v: -2.5 <= v < 4.5),
        (ic(Op.GREATER_THAN, 10), ic(Op.LESS_THAN, 20), lambda v: 10 < v < 20),
    ],
)
def test_filter_range(indexer, lower, upper, pred):
    assert indexer.filter_range(lower, upper) == expected(pred)


def test_results_are_independent_copies(indexer):
    result = indexer.filter(ic(Op.EQUAL, 5))
    result.add(99)
    assert indexer.filter(ic(Op.EQUAL, 5)) == expected(lambda v: v == 5)


def test_empty_indexer_returns_nothing():
    idx = make_indexer()
    assert idx.filter(ic(Op.GREATER_THAN_EQUAL, 0)) == set()
    assert idx.filter_range(ic(Op.GREATER_THAN, 0), ic(Op.LESS_THAN, 5)) == set()