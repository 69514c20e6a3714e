"""Identifier generators for locally created nodes.

The store takes a generator as an explicit dependency so tests can
supply deterministic ids.
"""

import threading
import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """Source of process-wide unique node identifiers."""

    @abstractmethod
    def next_id(self) -> str:
        """Return a fresh identifier, never returned before by this generator."""
        pass

    def __call__(self) -> str:
        return self.next_id()


class CounterIdGenerator(IdGenerator):
    """Monotonic counter ids: ``node-101``, ``node-102``, ...

    The counter is guarded by a lock so one generator can be shared
    between stores running in different threads.
    """

    def __init__(self, prefix: str = "node-", start: int = 100):
        """
        Args:
            prefix: String prepended to every id
            start: Last value considered used; the first id is ``start + 1``
        """
        self.prefix = prefix
        self._counter = start
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            self._counter += 1
            value = self._counter
        return f"{self.prefix}{value}"

    @property
    def last_value(self) -> int:
        return self._counter

    def __repr__(self) -> str:
        return f"CounterIdGenerator(prefix={self.prefix!r}, last={self._counter})"


class UuidIdGenerator(IdGenerator):
    """Random UUID4 ids, optionally prefixed."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def next_id(self) -> str:
        return f"{self.prefix}{uuid.uuid4().hex}"
