"""Unit tests for bookmarkd.lock module."""

import threading
import time

import pytest

from bookmarkd.errors import StoreBusyError
from bookmarkd.lock import RWLock


def _wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.005)


class TestRWLock:
    """Test reader/writer exclusion."""

    def test_readers_share(self):
        """Should let several readers hold the lock together."""
        lock = RWLock()
        inside = []
        barrier = threading.Barrier(3, timeout=2)

        def reader():
            with lock.read(timeout=1):
                inside.append(1)
                barrier.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(2)
        assert len(inside) == 3

    def test_writer_excludes_readers(self):
        """Should time out a reader while a writer holds the lock."""
        lock = RWLock()
        with lock.write():
            with pytest.raises(StoreBusyError):
                lock.acquire_read(timeout=0.05)

    def test_reader_excludes_writer(self):
        """Should time out a writer while a reader holds the lock."""
        lock = RWLock()
        errors = []

        def writer():
            try:
                lock.acquire_write(timeout=0.05)
            except StoreBusyError as exc:
                errors.append(exc)

        with lock.read():
            t = threading.Thread(target=writer)
            t.start()
            t.join(2)
        assert len(errors) == 1

    def test_waiting_writer_blocks_new_readers(self):
        """Should hold back new readers once a writer is queued."""
        lock = RWLock()
        lock.acquire_read()
        acquired = threading.Event()

        def writer():
            with lock.write(timeout=2):
                acquired.set()

        t = threading.Thread(target=writer)
        t.start()
        _wait_until(lambda: lock._waiting_writers == 1)
        with pytest.raises(StoreBusyError):
            lock.acquire_read(timeout=0.05)
        lock.release_read()
        t.join(2)
        assert acquired.is_set()
        with lock.read(timeout=1):
            pass

    def test_write_timeout_releases_queued_readers(self):
        """Should let readers in again after a writer gives up."""
        lock = RWLock()
        lock.acquire_read()
        errors = []

        def writer():
            try:
                lock.acquire_write(timeout=0.1)
            except StoreBusyError as exc:
                errors.append(exc)

        t = threading.Thread(target=writer)
        t.start()
        t.join(2)
        assert errors
        with lock.read(timeout=0.5):
            pass
        lock.release_read()

    def test_released_on_exception(self):
        """Should release the lock when the block raises."""
        lock = RWLock()
        with pytest.raises(RuntimeError):
            with lock.write():
                raise RuntimeError("boom")
        with lock.write(timeout=0.1):
            pass
