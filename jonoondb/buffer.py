"""Growable byte buffer with a fixed capacity and a separate fill length."""

from __future__ import annotations

from functools import total_ordering
from typing import Optional, Union

from .errors import InvalidArgumentError, JonoonDBError

BytesLike = Union[bytes, bytearray, memoryview]


@total_ordering
class Buffer:
    """Byte storage of a given capacity, of which the first ``len()`` bytes hold data.

    Buffers compare by their data: byte by byte, with a shorter buffer that is
    a prefix of a longer one ordered first.
    """

    __hash__ = None  # mutable

    def __init__(
        self, data: Optional[BytesLike] = None, capacity: Optional[int] = None
    ) -> None:
        if capacity is not None and capacity < 0:
            raise InvalidArgumentError("Argument capacity cannot be negative.")

        payload = b"" if data is None else bytes(data)
        if not payload:
            self._storage = bytearray(capacity or 0)
            self._length = 0
            return

        if capacity is None:
            capacity = len(payload)
        elif capacity == 0:
            raise InvalidArgumentError(
                "Argument buffer is a valid pointer but bufferLengthInBytes or "
                "bufferCapacityInBytes are 0."
            )
        if capacity < len(payload):
            raise InvalidArgumentError(
                "Argument bufferCapacityInBytes cannot be less than "
                "bufferLengthInBytes."
            )
        self._storage = bytearray(capacity)
        self._storage[: len(payload)] = payload
        self._length = len(payload)

    @property
    def capacity(self) -> int:
        """Number of bytes the buffer can hold."""
        return len(self._storage)

    @property
    def data(self) -> bytes:
        """The bytes currently held."""
        return bytes(self._storage[: self._length])

    @property
    def length(self) -> int:
        """Number of bytes currently held."""
        return self._length

    @length.setter
    def length(self, value: int) -> None:
        if value < 0:
            raise InvalidArgumentError("Argument val cannot be negative.")
        if value > self.capacity:
            raise InvalidArgumentError(
                f"Argument val specifying buffer length {value} cannot be greater "
                f"than the buffer capacity {self.capacity}."
            )
        self._length = value

    def writable(self) -> memoryview:
        """A writable view of the whole storage, for filling in place."""
        return memoryview(self._storage)

    def resize(self, capacity: int) -> None:
        """Change the capacity; existing data is discarded unless it is unchanged."""
        if capacity < 0:
            raise InvalidArgumentError("Argument capacity cannot be negative.")
        if capacity == self.capacity and capacity != 0:
            return
        self._storage = bytearray(capacity)
        self._length = 0

    def copy_from(self, data: Optional[BytesLike]) -> None:
        """Replace the contents with ``data``, which must fit the capacity."""
        if data is None:
            raise InvalidArgumentError("Argument buffer is nullptr.")
        payload = bytes(data)
        if not payload:
            return
        if self.capacity < len(payload):
            raise JonoonDBError(
                f"Cannot copy {len(payload)} bytes into a buffer of capacity "
                f"{self.capacity} bytes."
            )
        self._storage[: len(payload)] = payload
        self._length = len(payload)

    def copy(self) -> Buffer:
        """An independent buffer with the same capacity and contents."""
        clone = Buffer(capacity=self.capacity)
        clone._storage[:] = self._storage
        clone._length = self._length
        return clone

    __copy__ = copy

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return self._length

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        return self.data < other.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"Buffer({self.data!r}, capacity={self.capacity})"