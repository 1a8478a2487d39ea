"""Readers-writer lock shared by the factory and the extension manager.

Any number of threads may read at once. A writer waits for active readers
to leave and then runs alone. Both sides are reentrant per thread, and the
thread holding the write lock may also read. Waiting writers hold back new
readers so a steady stream of lookups cannot starve a reload.

A thread holding only the read lock must not ask for the write lock; that
deadlocks.

Example:
    ```python
    lock = ReadWriteLock()

    with lock.read():
        value = registry.get(name)

    with lock.write():
        registry[name] = value
    ```
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Shared reads, exclusive reentrant writes."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer: int | None = None
        self._write_depth = 0
        self._writers_waiting = 0
        self._local = threading.local()

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock for reading."""
        if self._writer == threading.get_ident():
            yield
            return

        depth = getattr(self._local, "depth", 0)
        with self._condition:
            # Nested reads skip the queue, otherwise a waiting writer deadlocks them
            while depth == 0 and (self._writer is not None or self._writers_waiting):
                self._condition.wait()
            self._readers += 1
        self._local.depth = depth + 1

        try:
            yield
        finally:
            self._local.depth = depth
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        me = threading.get_ident()
        with self._condition:
            if self._writer == me:
                self._write_depth += 1
            else:
                self._writers_waiting += 1
                try:
                    while self._writer is not None or self._readers:
                        self._condition.wait()
                finally:
                    self._writers_waiting -= 1
                self._writer = me
                self._write_depth = 1

        try:
            yield
        finally:
            with self._condition:
                self._write_depth -= 1
                if self._write_depth == 0:
                    self._writer = None
                    self._condition.notify_all()

    @property
    def readers(self) -> int:
        """Number of read holds currently active."""
        with self._condition:
            return self._readers


__all__ = ["ReadWriteLock"]
