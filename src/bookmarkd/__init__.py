"""Personal bookmark store: one JSON file, in-memory reads, explicit sync.

Layout:
    bookmarkd.toml        # optional config (store path, server, log level)
    bookmarks.json        # JSON array of bookmark objects

Bookmark object:
    {"date": "2023-01-01T00:00:00Z", "link": "https://...", "starred": false,
     "tags": [...], "categories": [...]}

Concurrency: one reader/writer lock per Store. Queries share it; push and
sync take it exclusively. Writes reach disk only through Store.sync(), which
replaces the file atomically (temp file + rename).
"""

from bookmarkd.config import BookmarkdConfig, init_config, load_config
from bookmarkd.errors import ParseError, StoreBusyError, StoreError, StoreIOError
from bookmarkd.models import Bookmark, Filter, matches
from bookmarkd.store import Store

__all__ = [
    "Bookmark",
    "BookmarkdConfig",
    "Filter",
    "ParseError",
    "Store",
    "StoreBusyError",
    "StoreError",
    "StoreIOError",
    "init_config",
    "load_config",
    "matches",
]
