"""bookmarkd CLI: personal bookmark store served over HTTP.

Commands:
    bookmarkd init                   create bookmarkd.toml + an empty store
    bookmarkd serve [BOOKMARKS]      serve the HTTP API
    bookmarkd add LINK               push a bookmark and sync
    bookmarkd list                   print bookmarks matching a filter
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click

from bookmarkd.config import BookmarkdConfig, init_config, load_config
from bookmarkd.errors import ParseError, StoreError
from bookmarkd.models import Bookmark, Filter, format_timestamp, parse_timestamp
from bookmarkd.store import Store

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger("bookmarkd.cli")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> BookmarkdConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _open_store(cfg: BookmarkdConfig, path: Path | None = None) -> Store:
    try:
        return Store.open(path or cfg.store.path, lock_timeout=cfg.store.timeout)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc


def _timestamp_option(ctx: click.Context, param: click.Parameter, value: str | None) -> datetime | None:  # noqa: ARG001
    if value is None:
        return None
    try:
        return parse_timestamp(value, param.name or "date")
    except ParseError as exc:
        raise click.BadParameter(exc.reason) from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="bookmarkd")
def cli() -> None:
    """bookmarkd: personal bookmark store."""


# ---------------------------------------------------------------------------
# bookmarkd init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(root: str) -> None:
    """Create bookmarkd.toml and an empty bookmark file."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("bookmarkd.toml already exists, skipping")
    cfg = load_config(root_path)
    if cfg.store.path.exists():
        click.echo(f"Store     : {cfg.store.path} (exists)")
    else:
        cfg.store.path.parent.mkdir(parents=True, exist_ok=True)
        cfg.store.path.write_text("[]")
        click.echo(f"Store     : {cfg.store.path}")


# ---------------------------------------------------------------------------
# bookmarkd serve
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("bookmarks", required=False, type=click.Path(path_type=Path))
@click.option("--host", default=None, help="Interface to bind (default from config: 0.0.0.0)")
@click.option("-p", "--port", type=int, default=None, help="Port to listen on (default from config: 3000)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error", "critical"]),
    default=None,
    help="Logging level (default from config: info)",
)
def serve(bookmarks: Path | None, host: str | None, port: int | None, log_level: str | None) -> None:
    """Serve the bookmark API for BOOKMARKS (a JSON file)."""
    from bookmarkd.web import serve as _serve

    cfg = _load_cfg()
    logging.basicConfig(
        level=(log_level or cfg.log.level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    store = _open_store(cfg, bookmarks)
    logger.info("loaded %d bookmarks from %s", len(store), store.path)
    _serve(store, host or cfg.server.host, port if port is not None else cfg.server.port)


# ---------------------------------------------------------------------------
# bookmarkd add
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("link")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("-c", "--category", "categories", multiple=True, help="Category (repeatable)")
@click.option("--starred", is_flag=True, help="Star the bookmark")
@click.option("--store", "store_path", type=click.Path(path_type=Path), default=None, help="Bookmark file")
def add(link: str, tags: tuple[str, ...], categories: tuple[str, ...], starred: bool, store_path: Path | None) -> None:
    """Add LINK to the store and write it to disk."""
    cfg = _load_cfg()
    store = _open_store(cfg, store_path)
    item = Bookmark(link=link, starred=starred, tags=list(tags), categories=list(categories))
    store.push(item)
    try:
        store.sync()
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {link} ({len(store)} bookmarks)")


# ---------------------------------------------------------------------------
# bookmarkd list
# ---------------------------------------------------------------------------


@cli.command("list")
@click.option("--since", callback=_timestamp_option, help="Only bookmarks dated after this (RFC 3339)")
@click.option("--until", callback=_timestamp_option, help="Only bookmarks dated at or before this (RFC 3339)")
@click.option("--starred/--unstarred", default=None, help="Filter on the starred flag")
@click.option("-t", "--tag", "tags", multiple=True, help="Required tag (repeatable)")
@click.option("-c", "--category", "categories", multiple=True, help="Required category (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON array")
@click.option("--store", "store_path", type=click.Path(path_type=Path), default=None, help="Bookmark file")
def list_cmd(
    since: datetime | None,
    until: datetime | None,
    starred: bool | None,
    tags: tuple[str, ...],
    categories: tuple[str, ...],
    as_json: bool,
    store_path: Path | None,
) -> None:
    """Print bookmarks matching the given filter."""
    cfg = _load_cfg()
    store = _open_store(cfg, store_path)
    flt = Filter(
        since=since,
        until=until,
        starred=starred,
        tags=list(tags),
        categories=list(categories),
    )
    items = store.query(flt)
    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
        return
    for item in items:
        star = "*" if item.starred else " "
        labels = " ".join([f"#{t}" for t in item.tags] + [f"@{c}" for c in item.categories])
        click.echo(f"{star} {format_timestamp(item.date)}  {item.link}" + (f"  {labels}" if labels else ""))
