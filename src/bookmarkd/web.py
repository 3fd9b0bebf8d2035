"""HTTP API over a Store.

Routes:
    GET  /             → [bookmark, ...] matching the query-string filter
    PUT  /             → push the JSON bookmark in the request body
    PUT  /sync         → reconcile the store with its backing file
    GET  /tags         → [tag, ...] of the matching bookmarks
    GET  /categories   → [category, ...] of the matching bookmarks

Filter parameters: since, until (RFC 3339), starred (true|false),
tags, categories (repeatable and/or comma separated).
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING, Any

from bookmarkd.errors import ParseError, StoreBusyError, StoreError
from bookmarkd.models import Bookmark, Filter, collect

if TYPE_CHECKING:
    from bookmarkd.store import Store

logger = logging.getLogger("bookmarkd.web")


# ---------------------------------------------------------------------------
# HTTP handler
# ---------------------------------------------------------------------------


class _Handler(BaseHTTPRequestHandler):
    store: Store  # injected via make_handler()

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)

    def _send_json(self, data: Any, status: int = 200) -> None:
        body = json.dumps(data, ensure_ascii=False).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_empty(self, status: int = 200) -> None:
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _send_error(self, status: int, message: str) -> None:
        self._send_json({"error": message}, status)

    def _filter(self, query: str) -> Filter | None:
        try:
            return Filter.from_query(urllib.parse.parse_qs(query))
        except ParseError as exc:
            self._send_error(400, str(exc))
            return None

    # ------------------------------------------------------------------
    # GET
    # ------------------------------------------------------------------

    def do_GET(self) -> None:
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path not in ("/", "", "/tags", "/categories"):
            self._send_error(404, "not found")
            return
        flt = self._filter(parsed.query)
        if flt is None:
            return
        try:
            items = self.store.query(flt)
        except StoreBusyError as exc:
            self._send_error(503, str(exc))
            return
        logger.debug("query matched %d bookmarks", len(items))

        if parsed.path == "/tags":
            self._send_json(collect(items, "tags"))
        elif parsed.path == "/categories":
            self._send_json(collect(items, "categories"))
        else:
            self._send_json([item.to_dict() for item in items])

    # ------------------------------------------------------------------
    # PUT
    # ------------------------------------------------------------------

    def do_PUT(self) -> None:
        path = urllib.parse.urlparse(self.path).path
        if path in ("/", ""):
            self._handle_push()
        elif path == "/sync":
            self._handle_sync()
        else:
            self._send_error(404, "not found")

    def _handle_push(self) -> None:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            length = -1
        if length < 0:
            self._send_error(400, "invalid Content-Length")
            return
        raw = self.rfile.read(length) if length else b""
        try:
            item = Bookmark.from_dict(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError):
            self._send_error(400, "invalid JSON")
            return
        except ParseError as exc:
            self._send_error(400, str(exc))
            return
        logger.debug("push: %s", item.link)
        try:
            self.store.push(item)
        except StoreBusyError as exc:
            self._send_error(503, str(exc))
            return
        self._send_empty()

    def _handle_sync(self) -> None:
        logger.debug("sync database")
        try:
            self.store.sync()
        except StoreBusyError as exc:
            self._send_error(503, str(exc))
            return
        except StoreError as exc:
            logger.error("sync failed: %s", exc)
            self._send_error(500, str(exc))
            return
        self._send_empty()


def make_handler(store: Store) -> type[_Handler]:
    class _Bound(_Handler):
        pass
    _Bound.store = store
    return _Bound


def make_server(store: Store, host: str, port: int) -> ThreadingHTTPServer:
    """Bind a threaded HTTP server for store (port 0 picks a free port)."""
    return ThreadingHTTPServer((host, port), make_handler(store))


def serve(store: Store, host: str, port: int) -> None:
    """Serve the API (blocking until Ctrl+C)."""
    server = make_server(store, host, port)
    logger.info("listening on %s:%d", host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
