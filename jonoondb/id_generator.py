"""Thread-safe allocation of consecutive document ids."""

from __future__ import annotations

import threading

from .errors import InvalidArgumentError


class DocumentIDGenerator:
    """Hands out blocks of consecutive document ids, starting at ``start``."""

    def __init__(self, start: int = 0) -> None:
        self._current = start
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        """Id the next reservation will start at."""
        return self._current

    def reserve(self, count: int) -> int:
        """Reserve ``count`` ids and return the first of them."""
        if count < 0:
            raise InvalidArgumentError("Argument count cannot be negative.")
        with self._lock:
            first = self._current
            self._current += count
            return first