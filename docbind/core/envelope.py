"""Envelope Builder: the one response shape every operation kind answers with.

Invariants:
    - meta is always present (empty dict by default)
    - A terminal envelope carries data or error, never both
    - meta_only() is reserved for operations whose success implies no payload

Design Decisions:
    - Plain dicts over pydantic models: the body goes straight into a JSONResponse
    - meta is copied, never shared: callers may mutate what they pass in
"""

from typing import Any

from docbind.core.errors import DocbindError


def ok(data: Any, meta: dict | None = None) -> dict:
    """Success envelope carrying a payload (a document, a list, a count)."""
    return {"meta": dict(meta or {}), "data": data}


def meta_only(meta: dict | None = None) -> dict:
    """Success envelope with no payload (removals, bulk patches)."""
    return {"meta": dict(meta or {})}


def fail(error: DocbindError, meta: dict | None = None) -> dict:
    """Failure envelope carrying the error object."""
    return {"meta": dict(meta or {}), "error": error.to_error()}
