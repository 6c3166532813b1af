"""Filter Matching: evaluates QuerySpec filters, sort and projection against documents.

Invariants:
    - matches() never raises: failed casts, incomparable types and bad patterns
      mean "no match"
    - String query values are cast to the type of the document value they are
      compared with (int, float, bool, null) before comparison
    - project() always keeps the id key
    - sort_documents() is stable; missing/None values sort first

Design Decisions:
    - Casting against the stored value, not against a declared schema: documents
      are schema-less mappings, the stored value is the only type information
    - Plain (non-dict) filter values are treated as equality, so programmatic
      callers can pass {"title": "X"}
"""

import re
from typing import Any, Callable, Iterable, Mapping

from docbind.core.domain_types import Document
from docbind.core.query_translator import QuerySpec


_MISSING = object()

NULL_TOKENS = frozenset({"null", "none"})
TRUE_TOKENS = frozenset({"true", "1", "yes"})
FALSE_TOKENS = frozenset({"false", "0", "no"})


class _NoMatch(Exception):
    """Raised internally when a query value cannot be cast to the stored type."""


def matches(document: Mapping[str, Any], filter: Mapping[str, Any] | None) -> bool:
    """True when the document satisfies every term of the filter."""
    for field_name, condition in (filter or {}).items():
        actual = document.get(field_name, _MISSING)
        if isinstance(condition, Mapping):
            terms = condition.items()
        else:
            terms = [("$eq", condition)]
        for op, expected in terms:
            if not _evaluate(op, actual, expected):
                return False
    return True


def filter_documents(
    documents: Iterable[Mapping[str, Any]], filter: Mapping[str, Any] | None,
) -> list[Document]:
    return [dict(doc) for doc in documents if matches(doc, filter)]


def sort_documents(
    documents: list[Document], sort: Iterable[tuple[str, int]],
) -> list[Document]:
    """Sort by each (field, direction) key; last key applied first."""
    ordered = list(documents)
    for field_name, direction in reversed(list(sort)):
        ordered.sort(
            key=lambda doc: _sort_key(doc.get(field_name)),
            reverse=direction < 0,
        )
    return ordered


def project(
    document: Document, fields: Iterable[str], exclude: Iterable[str], id_key: str,
) -> Document:
    """Apply include/exclude projection lists. The id key always survives."""
    fields = list(fields)
    exclude = set(exclude) - {id_key}
    if fields:
        keep = set(fields) | {id_key}
        document = {k: v for k, v in document.items() if k in keep}
    return {k: v for k, v in document.items() if k not in exclude}


def run_query(
    documents: Iterable[Mapping[str, Any]], query: QuerySpec, id_key: str,
) -> list[Document]:
    """Filter, sort, skip, limit and project in that order."""
    found = filter_documents(documents, query.filter)
    if query.sort:
        found = sort_documents(found, query.sort)
    if query.skip:
        found = found[query.skip:]
    if query.limit is not None:
        found = found[:query.limit]
    if query.fields or query.exclude:
        found = [project(doc, query.fields, query.exclude, id_key) for doc in found]
    return found


# ─── Operators ───────────────────────────────────────────────────

def _evaluate(op: str, actual: Any, expected: Any) -> bool:
    handler = _OPERATORS.get(op)
    if handler is None:
        return False
    try:
        return handler(actual, expected)
    except (_NoMatch, TypeError, ValueError, re.error):
        return False


def _eq(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return expected is None or _is_null_token(expected)
    if isinstance(actual, list) and not isinstance(expected, list):
        return any(_equal(item, expected) for item in actual)
    return _equal(actual, expected)


def _ne(actual: Any, expected: Any) -> bool:
    return not _eq(actual, expected)


def _ordering(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is _MISSING or actual is None:
            return False
        return compare(actual, _cast(expected, actual))
    return check


def _in(actual: Any, expected: Any) -> bool:
    return any(_eq(actual, value) for value in _as_list(expected))


def _nin(actual: Any, expected: Any) -> bool:
    return not _in(actual, expected)


def _exists(actual: Any, expected: Any) -> bool:
    wanted = expected if isinstance(expected, bool) else (
        str(expected).strip().lower() in TRUE_TOKENS
    )
    return (actual is not _MISSING) is wanted


def _regex(actual: Any, expected: Any) -> bool:
    if not isinstance(actual, str):
        return False
    return re.search(str(expected), actual) is not None


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": _eq,
    "$ne": _ne,
    "$gt": _ordering(lambda a, b: a > b),
    "$gte": _ordering(lambda a, b: a >= b),
    "$lt": _ordering(lambda a, b: a < b),
    "$lte": _ordering(lambda a, b: a <= b),
    "$in": _in,
    "$nin": _nin,
    "$exists": _exists,
    "$regex": _regex,
}


# ─── Casting ─────────────────────────────────────────────────────

def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    if isinstance(value, str):
        return [part for part in value.split(",") if part != ""]
    return [value]


def _is_null_token(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in NULL_TOKENS


def _equal(actual: Any, expected: Any) -> bool:
    if actual is None:
        return expected is None or _is_null_token(expected)
    try:
        return actual == _cast(expected, actual)
    except _NoMatch:
        return False


def _cast(value: Any, like: Any) -> Any:
    """Cast a query value to the type of a stored value."""
    if not isinstance(value, str) or isinstance(like, str):
        return value
    text = value.strip()
    if isinstance(like, bool):
        lowered = text.lower()
        if lowered in TRUE_TOKENS:
            return True
        if lowered in FALSE_TOKENS:
            return False
        raise _NoMatch(value)
    if isinstance(like, int):
        try:
            return int(text)
        except ValueError:
            try:
                return float(text)
            except ValueError:
                raise _NoMatch(value) from None
    if isinstance(like, float):
        try:
            return float(text)
        except ValueError:
            raise _NoMatch(value) from None
    raise _NoMatch(value)


def _sort_key(value: Any) -> tuple:
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, repr(value))
