import pytest

from jonoondb.errors import InvalidArgumentError
from jonoondb.id_sequence import id_batches


def test_batches_split_in_order():
    assert list(id_batches(range(7), 3)) == [[0, 1, 2], [3, 4, 5], [6]]


def test_empty_input_yields_nothing():
    assert list(id_batches(set(), 4)) == []


def test_unordered_ids_come_out_sorted():
    batches = list(id_batches({9, 2, 5, 1}, 2))
    assert batches == [[1, 2], [5, 9]]


def test_concatenation_matches_input():
    ids = {3, 17, 4, 100, 8, 0, 55}
    batches = list(id_batches(ids, 3))
    assert [i for batch in batches for i in batch] == sorted(ids)
    assert all(1 <= len(batch) <= 3 for batch in batches)


def test_batch_larger_than_input():
    assert list(id_batches([4, 2], 10)) == [[2, 4]]


@pytest.mark.parametrize("size", [0, -1])
def test_invalid_batch_size(size):
    with pytest.raises(InvalidArgumentError):
        list(id_batches([1, 2], size))