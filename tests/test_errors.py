import errno
import os

import pytest

from jonoondb.errors import (
    error_text,
    invalid_struct_field_error_string,
    missing_field_error_string,
)


def test_missing_field_message():
    assert (
        missing_field_error_string("price")
        == "Field definition for price not found in the parsed schema."
    )


def test_invalid_struct_field_message():
    msg = invalid_struct_field_error_string("address", "address.city")
    assert msg == (
        "Field address is not of type struct. "
        "Full name provided was address.city"
    )


@pytest.mark.parametrize("code", [errno.ENOENT, errno.EEXIST, errno.EACCES])
def test_error_text_matches_os(code):
    assert error_text(code) == os.strerror(code)


def test_error_text_distinct_codes_differ():
    assert error_text(errno.ENOENT) != error_text(errno.EEXIST)
    assert len(error_text(errno.ENOENT)) > 0