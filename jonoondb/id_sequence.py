"""Batched iteration over document ids."""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator

from .errors import InvalidArgumentError


def id_batches(ids: Iterable[int], batch_size: int) -> Iterator[list[int]]:
    """Yield the ids in ascending order, in lists of at most ``batch_size``."""
    if batch_size <= 0:
        raise InvalidArgumentError("Argument batch_size must be greater than 0.")
    iterator = iter(sorted(ids))
    while batch := list(islice(iterator, batch_size)):
        yield batch