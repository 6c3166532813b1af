"""Merge-Patch Engine: partial updates, full replacements and the version counter.

Invariants:
    - A patch writes only keys present in the payload; every other field is untouched
    - Nested values are replaced wholesale (no deep merge)
    - The id key is never written by a patch or a replacement
    - A patch increments the version counter by exactly 1; a replacement keeps it
    - A document without a version value is treated as version 0

Design Decisions:
    - MergePatch separates `fields` (set) from `increments` (add): a store can apply both
      in one update, so a bulk patch bumps each document's own counter
    - Replacement drops the payload's version key: optimistic checking reads it through
      expected_version() before the store call, it is never stored
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from docbind.core.domain_types import Document
from docbind.core.errors import ValidationFailureError

INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class MergePatch:
    """Fields to overwrite plus counters to increment, derived from a request body."""
    fields: dict[str, Any] = field(default_factory=dict)
    increments: dict[str, int] = field(default_factory=dict)


def build_patch(
    payload: Mapping[str, Any], *, id_key: str, version_key: str | None,
) -> MergePatch:
    """Strip id and version keys from the payload; bump the version if there is one."""
    protected = {id_key, version_key}
    fields = {k: v for k, v in payload.items() if k not in protected}
    increments = {version_key: 1} if version_key else {}
    return MergePatch(fields=fields, increments=increments)


def apply_patch(document: Mapping[str, Any], patch: MergePatch) -> Document:
    """Return a new document with the patch applied. The input is not mutated."""
    updated = dict(document)
    updated.update(patch.fields)
    for key, step in patch.increments.items():
        current = updated.get(key)
        updated[key] = (current if isinstance(current, int) else 0) + step
    return updated


def build_replacement(
    document: Mapping[str, Any],
    payload: Mapping[str, Any],
    *,
    id_key: str,
    version_key: str | None,
) -> Document:
    """Replace every non-id, non-version field of document with the payload's."""
    replaced: Document = {id_key: document.get(id_key)}
    if version_key:
        current = document.get(version_key)
        replaced[version_key] = current if isinstance(current, int) else 0
    for key, value in payload.items():
        if key not in (id_key, version_key):
            replaced[key] = value
    return replaced


def expected_version(payload: Mapping[str, Any], version_key: str | None) -> int | None:
    """Version the client last saw, for optimistic checking on replacement.

    Accepts ints, integral floats (`2.0`) and digit strings (`"2"`). Anything else,
    including `0.9` and booleans, is a validation failure rather than a truncation.
    """
    if not version_key or version_key not in payload:
        return None
    value = payload[version_key]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and INTEGER_TEXT.fullmatch(value.strip()):
        return int(value)
    raise ValidationFailureError(
        f"'{version_key}' must be an integer",
        details=[{"field": version_key, "message": "not an integer", "type": "int_type"}],
    )
