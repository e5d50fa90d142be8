import copy

import pytest

from jonoondb.buffer import Buffer
from jonoondb.errors import InvalidArgumentError, JonoonDBError


def test_default_buffer_is_empty():
    buf = Buffer()
    assert len(buf) == 0
    assert buf.capacity == 0
    assert buf.data == b""


def test_capacity_only_buffer():
    buf = Buffer(capacity=16)
    assert len(buf) == 0
    assert buf.capacity == 16


def test_data_with_capacity():
    buf = Buffer(b"abc", 10)
    assert buf.data == b"abc"
    assert len(buf) == 3
    assert buf.capacity == 10


def test_capacity_defaults_to_length():
    buf = Buffer(b"hello")
    assert buf.capacity == len(b"hello")


def test_capacity_smaller_than_length_rejected():
    with pytest.raises(InvalidArgumentError):
        Buffer(b"hello", 2)


def test_zero_capacity_with_data_rejected():
    with pytest.raises(InvalidArgumentError):
        Buffer(b"hello", 0)


def test_resize_discards_data():
    buf = Buffer(b"abc", 4)
    buf.resize(8)
    assert buf.capacity == 8
    assert len(buf) == 0


def test_resize_same_capacity_keeps_data():
    buf = Buffer(b"abc", 4)
    buf.resize(4)
    assert buf.data == b"abc"


def test_resize_to_zero():
    buf = Buffer(b"abc")
    buf.resize(0)
    assert buf.capacity == 0
    assert len(buf) == 0


def test_copy_from_fits():
    buf = Buffer(capacity=8)
    buf.copy_from(b"xyz")
    assert buf.data == b"xyz"


def test_copy_from_too_large():
    buf = Buffer(capacity=2)
    with pytest.raises(JonoonDBError):
        buf.copy_from(b"xyz")


def test_copy_from_none():
    with pytest.raises(InvalidArgumentError):
        Buffer(capacity=2).copy_from(None)


def test_length_setter_validates():
    buf = Buffer(capacity=4)
    buf.writable()[:2] = b"ok"
    buf.length = 2
    assert buf.data == b"ok"
    with pytest.raises(InvalidArgumentError):
        buf.length = 5


def test_ordering_prefix_first():
    assert Buffer(b"ab") < Buffer(b"abc")
    assert Buffer(b"abc") > Buffer(b"ab")
    assert Buffer() < Buffer(b"a")
    assert Buffer(b"b") > Buffer(b"abc")


def test_equality_ignores_capacity():
    assert Buffer(b"abc", 3) == Buffer(b"abc", 10)
    assert Buffer(b"abc") <= Buffer(b"abc")
    assert not (Buffer(b"abc") != Buffer(b"abc"))
    assert Buffer() == Buffer(capacity=5)


def test_copy_is_independent():
    original = Buffer(b"abc", 5)
    clone = copy.copy(original)
    clone.copy_from(b"zz")
    assert original.data == b"abc"
    assert clone.capacity == original.capacity
    assert bytes(clone) == b"zzc"[:2]