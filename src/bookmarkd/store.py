"""Store: the in-memory bookmark collection backed by one JSON file.

    store = Store.open("bookmarks.json")
    store.push(Bookmark(link="https://example.com"))
    hits = store.query(Filter(tags=["python"]))
    store.sync()

All access goes through a reader/writer lock: view/query share it, push/sync
hold it exclusively. Nothing touches disk except open() and sync().

sync() reconciliation:
    - the file's mtime is compared with the mtime recorded at the last
      load/persist; if the file is newer it was edited externally
    - on external change the file is reloaded and every record pushed since
      the last successful sync is appended on top of the disk contents
    - if any pushes are pending, the whole collection is written to a temp
      file which then replaces the backing file
"""

from __future__ import annotations

import contextlib
import fcntl
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from bookmarkd.errors import StoreIOError
from bookmarkd.lock import RWLock
from bookmarkd.models import dump_bookmarks, load_bookmarks

if TYPE_CHECKING:
    from bookmarkd.models import Bookmark, Filter

logger = logging.getLogger("bookmarkd.store")


def _mtime_ns(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError as exc:
        raise StoreIOError(path, "stat", exc) from exc


def _load(path: Path) -> list[Bookmark]:
    """Read and parse the whole backing file."""
    logger.debug("reading: %s", path)
    try:
        with path.open("rb") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = f.read()
    except OSError as exc:
        raise StoreIOError(path, "read", exc) from exc
    return load_bookmarks(data)


def _dump(path: Path, items: list[Bookmark]) -> None:
    """Atomically overwrite the backing file: write a temp file, then rename."""
    text = dump_bookmarks(items)
    logger.debug("writing: %s (%d bookmarks)", path, len(items))
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(text)
        tmp.replace(path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise StoreIOError(path, "write", exc) from exc


class Store:
    """Authoritative bookmark collection for one backing file."""

    def __init__(
        self,
        path: Path,
        items: list[Bookmark],
        synced_mtime_ns: int,
        lock_timeout: float | None = None,
    ) -> None:
        self._path = path
        self._items = items
        self._pending: list[Bookmark] = []   # pushed since last successful sync
        self._synced_mtime_ns = synced_mtime_ns
        self._lock = RWLock()
        self.lock_timeout = lock_timeout

    @classmethod
    def open(cls, path: Path | str, lock_timeout: float | None = None) -> Store:
        """Load every record from path. Raises StoreIOError or ParseError."""
        path = Path(path)
        # mtime first: an edit racing the read then still shows up as stale
        mtime = _mtime_ns(path)
        return cls(path, _load(path), mtime, lock_timeout=lock_timeout)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def dirty(self) -> bool:
        """True while pushed records have not been persisted."""
        with self._lock.read(self.lock_timeout):
            return bool(self._pending)

    def __len__(self) -> int:
        with self._lock.read(self.lock_timeout):
            return len(self._items)

    def view(self) -> tuple[Bookmark, ...]:
        """Snapshot of all records, in insertion order."""
        with self._lock.read(self.lock_timeout):
            return tuple(self._items)

    def query(self, flt: Filter) -> list[Bookmark]:
        """Records matching flt, in insertion order."""
        with self._lock.read(self.lock_timeout):
            return [item for item in self._items if flt.matches(item)]

    def push(self, item: Bookmark) -> None:
        """Append item in memory and mark the store dirty. No disk I/O."""
        with self._lock.write(self.lock_timeout):
            self._items.append(item)
            self._pending.append(item)

    def sync(self) -> None:
        """Reconcile with the backing file. Raises StoreIOError or ParseError.

        Holds the exclusive lock for the whole operation, including disk I/O.
        On failure the store stays dirty and keeps its pending records.
        """
        with self._lock.write(self.lock_timeout):
            mtime = _mtime_ns(self._path)
            if mtime > self._synced_mtime_ns:
                on_disk = _load(self._path)
                if self._pending:
                    logger.warning(
                        "%s changed on disk; keeping %d external record(s) and re-applying %d pending push(es)",
                        self._path, len(on_disk), len(self._pending),
                    )
                else:
                    logger.info("%s changed on disk; reloaded %d record(s)", self._path, len(on_disk))
                self._items = on_disk + self._pending
                self._synced_mtime_ns = mtime

            if self._pending:
                _dump(self._path, self._items)
                self._pending = []
                self._synced_mtime_ns = _mtime_ns(self._path)
