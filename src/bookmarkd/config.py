"""BookmarkdConfig: optional project-local config for the bookmark server.

bookmarkd.toml example:

    [store]
    path = "bookmarks.json"   # relative to the directory holding bookmarkd.toml
    lock_timeout = 0          # seconds to wait for store access, 0 = forever

    [server]
    host = "0.0.0.0"
    port = 3000

    [log]
    level = "info"

Command-line options override these values.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "bookmarkd.toml"
_DEFAULT_STORE_PATH = "bookmarks.json"
_DEFAULT_HOST = "0.0.0.0"  # noqa: S104
_DEFAULT_PORT = 3000
_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class StoreConfig:
    path: Path = field(default_factory=lambda: Path(_DEFAULT_STORE_PATH))
    lock_timeout: float = 0.0   # 0 = wait forever

    @property
    def timeout(self) -> float | None:
        """Lock timeout in the form RWLock expects."""
        return self.lock_timeout if self.lock_timeout > 0 else None


@dataclass
class ServerConfig:
    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT


@dataclass
class LogConfig:
    level: str = "info"


@dataclass
class BookmarkdConfig:
    """Resolved configuration."""

    root: Path                      # directory that contains bookmarkd.toml
    store: StoreConfig = field(default_factory=StoreConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log: LogConfig = field(default_factory=LogConfig)


def load_config(root: Path | str | None = None) -> BookmarkdConfig:
    """Load bookmarkd.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    store_section = raw.get("store", {})
    srv_section = raw.get("server", {})
    log_section = raw.get("log", {})

    level = str(log_section.get("level", "info")).lower()
    if level not in _LOG_LEVELS:
        msg = f"{config_path}: unknown log level {level!r} (expected one of {', '.join(_LOG_LEVELS)})"
        raise ValueError(msg)

    return BookmarkdConfig(
        root=root_path,
        store=StoreConfig(
            path=root_path / store_section.get("path", _DEFAULT_STORE_PATH),
            lock_timeout=float(store_section.get("lock_timeout", 0.0)),
        ),
        server=ServerConfig(
            host=str(srv_section.get("host", _DEFAULT_HOST)),
            port=int(srv_section.get("port", _DEFAULT_PORT)),
        ),
        log=LogConfig(level=level),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for bookmarkd.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path) -> Path:
    """Write a default bookmarkd.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"bookmarkd.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[store]
path = "{_DEFAULT_STORE_PATH}"
# lock_timeout = 0   # seconds to wait for store access; 0 waits forever

[server]
# host = "{_DEFAULT_HOST}"
# port = {_DEFAULT_PORT}

[log]
# level = "info"     # debug | info | warning | error | critical
"""
    config_path.write_text(content)
    return config_path
