"""Shared fixtures for bookmarkd tests."""

import json
import os

import pytest


SAMPLE = [
    {
        "date": "2023-01-01T00:00:00Z",
        "link": "https://example.com",
        "starred": True,
        "tags": ["python", "web"],
        "categories": ["dev"],
    },
    {
        "date": "2023-06-15T12:30:00Z",
        "link": "https://rust-lang.org",
        "tags": ["rust"],
    },
    {
        "date": "2024-02-01T08:00:00Z",
        "link": "https://example.com",
        "categories": ["reading", "dev"],
    },
]


def write_store(path, records):
    path.write_text(json.dumps(records))
    return path


def touch_later(path, seconds=5):
    """Push the file's mtime forward so it looks externally modified."""
    st = path.stat()
    later = st.st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(later, later))


@pytest.fixture
def empty_store_file(tmp_path):
    return write_store(tmp_path / "bookmarks.json", [])


@pytest.fixture
def sample_store_file(tmp_path):
    return write_store(tmp_path / "bookmarks.json", SAMPLE)
