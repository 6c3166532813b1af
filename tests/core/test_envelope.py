"""Envelope Builder: tests for the uniform response shape.

Tests cover:
    - ok() carries data (including falsy data like 0 and [])
    - meta_only() carries neither data nor error
    - fail() carries the error object, never data
    - meta is always present and never shared with the caller
"""

from docbind.core import envelope
from docbind.core.errors import NotFoundError


def test_ok_carries_data():
    assert envelope.ok({"title": "X"}) == {"meta": {}, "data": {"title": "X"}}


def test_ok_keeps_falsy_data():
    assert envelope.ok(0) == {"meta": {}, "data": 0}
    assert envelope.ok([]) == {"meta": {}, "data": []}


def test_meta_only():
    assert envelope.meta_only() == {"meta": {}}


def test_fail_carries_error_only():
    body = envelope.fail(NotFoundError("Book", "abc"))
    assert set(body) == {"meta", "error"}
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
    assert "data" not in body


def test_meta_is_copied():
    meta = {"page": 1}
    body = envelope.ok([], meta)
    meta["page"] = 2
    assert body["meta"] == {"page": 1}
