"""Reader/writer lock guarding a Store.

Readers share the lock; a writer holds it alone. A writer that is waiting
blocks newly arriving readers, so a steady stream of queries cannot starve
push/sync.
"""

from __future__ import annotations

import contextlib
import threading
from typing import TYPE_CHECKING

from bookmarkd.errors import StoreBusyError

if TYPE_CHECKING:
    from collections.abc import Iterator


class RWLock:
    """Writer-preferring reader/writer lock."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self, timeout: float | None = None) -> None:
        with self._cond:
            ok = self._cond.wait_for(
                lambda: not self._writer and not self._waiting_writers, timeout
            )
            if not ok:
                msg = f"timed out after {timeout}s waiting for read access"
                raise StoreBusyError(msg)
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: float | None = None) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                ok = self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0, timeout
                )
            finally:
                self._waiting_writers -= 1
            if not ok:
                # Readers held back by this writer may proceed now
                self._cond.notify_all()
                msg = f"timed out after {timeout}s waiting for write access"
                raise StoreBusyError(msg)
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextlib.contextmanager
    def read(self, timeout: float | None = None) -> Iterator[None]:
        """Hold shared access for the duration of the block."""
        self.acquire_read(timeout)
        try:
            yield
        finally:
            self.release_read()

    @contextlib.contextmanager
    def write(self, timeout: float | None = None) -> Iterator[None]:
        """Hold exclusive access for the duration of the block."""
        self.acquire_write(timeout)
        try:
            yield
        finally:
            self.release_write()
