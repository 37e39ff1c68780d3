"""Lock-protected value cells.

Each setting of the controller lives in its own cell so that reading the
delay from the feeder thread never contends with a restore in progress.
"""
from __future__ import annotations

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class SafeValue(Generic[T]):
    """A value guarded by its own lock."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def __repr__(self) -> str:
        return f"SafeValue({self.get()!r})"
