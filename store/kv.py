"""
KeyValueStore — the narrow persistence interface used by the engine.

Callers only ever get() and set() whole string values under a key.
Keeping the surface this small lets a backend add atomic appends or
compare-and-set later without touching callers.
"""

import threading
from abc import ABC, abstractmethod
from typing import Optional


class StoreError(Exception):
    """Raised when a backend cannot read or write a key."""

    def __init__(self, key, operation, cause=None):
        self.key = key
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Store {operation} failed for key '{key}'{detail}")


class KeyValueStore(ABC):
    """String-to-string persistent map."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and single-process demos."""

    def __init__(self, initial=None):
        self._data = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._data.get(key)

    def set(self, key, value):
        if not isinstance(value, str):
            raise TypeError(f"value must be str, got {type(value).__name__}")
        with self._lock:
            self._data[key] = value

    def keys(self) -> list:
        with self._lock:
            return list(self._data)
