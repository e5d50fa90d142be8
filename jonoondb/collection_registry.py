"""Process-wide registry of document collections by name."""

from __future__ import annotations

import threading
from functools import lru_cache
from typing import Any, Optional


class CollectionRegistry:
    """Maps collection keys to collection objects."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._lock = threading.Lock()

    def insert(self, key: str, collection: Any) -> None:
        """Register ``collection`` under ``key``, replacing any earlier entry."""
        with self._lock:
            self._entries[key] = collection

    def get(self, key: str) -> Optional[Any]:
        """The collection registered under ``key``, or None."""
        with self._lock:
            return self._entries.get(key)

    def remove(self, key: str) -> None:
        """Forget ``key``; unknown keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Forget every entry."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_instance_lock = threading.Lock()


@lru_cache(maxsize=None)
def _create_registry() -> CollectionRegistry:
    return CollectionRegistry()


def get_registry() -> CollectionRegistry:
    """The single registry shared by the whole process."""
    with _instance_lock:
        return _create_registry()