"""Bookmark records, query filters, and their JSON shape.

Record document (the backing file is a JSON array of these):
    {
      "date": "2023-01-01T00:00:00Z",
      "link": "https://example.com",
      "starred": false,          # optional, default false
      "tags": ["rust", "web"],   # optional, default []
      "categories": ["dev"]      # optional, default []
    }

A Filter selects records with ``since < date <= until``, an exact ``starred``
value, and tag/category subsets. Unset fields impose no constraint.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from bookmarkd.errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

_TRUE = "true"
_FALSE = "false"


def _unique(items: Iterable[str]) -> list[str]:
    """Drop repeated entries, keeping first-seen order."""
    return list(dict.fromkeys(items))


def now() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(text: str, name: str = "date") -> datetime:
    """Parse an RFC 3339 timestamp. An explicit UTC offset is required."""
    if not isinstance(text, str):
        msg = f"expected a timestamp string, got {type(text).__name__}"
        raise ParseError(msg, field=name)
    try:
        value = datetime.fromisoformat(text.strip())
    except ValueError as exc:
        msg = f"invalid timestamp {text!r}"
        raise ParseError(msg, field=name) from exc
    if value.tzinfo is None:
        msg = f"timestamp {text!r} has no UTC offset"
        raise ParseError(msg, field=name)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _string_list(raw: Any, name: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(s, str) for s in raw):
        msg = "expected an array of strings"
        raise ParseError(msg, field=name)
    return _unique(raw)


@dataclass
class Bookmark:
    """A single bookmarked URL with its metadata."""

    link: str
    date: datetime = field(default_factory=now)
    starred: bool = False
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.tags = _unique(self.tags)
        self.categories = _unique(self.categories)

    @classmethod
    def from_dict(cls, d: Any) -> Bookmark:
        if not isinstance(d, dict):
            msg = f"expected an object, got {type(d).__name__}"
            raise ParseError(msg)
        link = d.get("link")
        if not isinstance(link, str):
            msg = "missing or not a string"
            raise ParseError(msg, field="link")
        starred = d.get("starred", False)
        if not isinstance(starred, bool):
            msg = "expected true or false"
            raise ParseError(msg, field="starred")
        return cls(
            link=link,
            date=parse_timestamp(d["date"]) if "date" in d else now(),
            starred=starred,
            tags=_string_list(d.get("tags", []), "tags"),
            categories=_string_list(d.get("categories", []), "categories"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_timestamp(self.date),
            "link": self.link,
            "starred": self.starred,
            "tags": list(self.tags),
            "categories": list(self.categories),
        }


@dataclass
class Filter:
    """Query predicate over bookmarks."""

    until: datetime | None = None      # inclusive upper bound
    since: datetime | None = None      # exclusive lower bound
    starred: bool | None = None
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    def matches(self, item: Bookmark) -> bool:
        """True when item satisfies every constraint that is set."""
        if self.since is not None and not item.date > self.since:
            return False
        if self.until is not None and not item.date <= self.until:
            return False
        if self.starred is not None and item.starred != self.starred:
            return False
        return set(self.tags) <= set(item.tags) and set(self.categories) <= set(item.categories)

    @classmethod
    def from_query(cls, params: Mapping[str, Sequence[str]]) -> Filter:
        """Build a filter from parsed query-string parameters.

        ``tags`` and ``categories`` may be repeated and/or comma separated.
        """
        def _last(name: str) -> str | None:
            values = params.get(name) or []
            return values[-1] if values else None

        def _split(name: str) -> list[str]:
            return _unique(
                part.strip()
                for value in params.get(name) or []
                for part in value.split(",")
                if part.strip()
            )

        starred: bool | None = None
        raw_starred = _last("starred")
        if raw_starred is not None:
            lowered = raw_starred.strip().lower()
            if lowered not in (_TRUE, _FALSE):
                msg = f"expected true or false, got {raw_starred!r}"
                raise ParseError(msg, field="starred")
            starred = lowered == _TRUE

        since = _last("since")
        until = _last("until")
        return cls(
            until=parse_timestamp(until, "until") if until else None,
            since=parse_timestamp(since, "since") if since else None,
            starred=starred,
            tags=_split("tags"),
            categories=_split("categories"),
        )


def matches(flt: Filter, item: Bookmark) -> bool:
    return flt.matches(item)


def collect(items: Iterable[Bookmark], attr: str) -> list[str]:
    """Ordered union of the ``tags`` or ``categories`` of items."""
    if attr not in ("tags", "categories"):
        msg = f"cannot collect {attr!r}"
        raise ValueError(msg)
    return _unique(value for item in items for value in getattr(item, attr))


def load_bookmarks(text: str | bytes) -> list[Bookmark]:
    """Parse a whole store document (a JSON array of records).

    Bytes are decoded as UTF-8.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"invalid UTF-8 at byte {exc.start}"
            raise ParseError(msg) from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"invalid JSON: {exc}"
        raise ParseError(msg) from exc
    if not isinstance(raw, list):
        msg = f"expected a JSON array of bookmarks, got {type(raw).__name__}"
        raise ParseError(msg)
    items: list[Bookmark] = []
    for i, obj in enumerate(raw):
        try:
            items.append(Bookmark.from_dict(obj))
        except ParseError as exc:
            where = f"[{i}].{exc.field}" if exc.field else f"[{i}]"
            raise ParseError(exc.reason, field=where) from exc
    return items


def dump_bookmarks(items: Iterable[Bookmark]) -> str:
    return json.dumps([b.to_dict() for b in items], indent=2, ensure_ascii=False)
