"""Query Translator: query-string parameters -> QuerySpec for collection operations.

Invariants:
    - translate() is total: malformed or unknown parameters are dropped, never raised
    - Reserved names (limit, skip, sort, fields) never become filter terms, even when
      a document field has the same name
    - limit/skip are non-negative ints or None; None means "no constraint"
    - Filter values stay strings (or lists of strings); the store casts them

Design Decisions:
    - `field__op=value` operator syntax: one flat query string, no JSON in URLs
    - Canonical filter form {field: {"$op": value}}: one shape for stores to interpret
    - Names whose field part is empty (`__v`, `__v__gt`) keep the leading underscores
      as part of the field name, so version counters stay filterable
    - The last `__` always separates field from operator: a field literally named
      `my__field` reads as field `my` with operator `field`, which is unknown, so the
      term is dropped. Such fields are filterable only with an explicit operator
      (`my__field__eq=x`)
"""

from dataclasses import dataclass, field
from typing import Any, Mapping


RESERVED_PARAMS = frozenset({"limit", "skip", "sort", "fields"})

OPERATOR_SEPARATOR = "__"

OPERATORS = frozenset({
    "eq", "ne", "gt", "gte", "lt", "lte", "in", "nin", "exists", "regex",
})

LIST_OPERATORS = frozenset({"in", "nin"})

TRUTHY = frozenset({"true", "1", "yes"})


@dataclass(frozen=True)
class QuerySpec:
    """Per-request filter/projection/sort/limit/skip derived from the query string."""
    filter: dict[str, dict[str, Any]] = field(default_factory=dict)
    fields: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    sort: tuple[tuple[str, int], ...] = ()
    limit: int | None = None
    skip: int | None = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.filter or self.fields or self.exclude or self.sort
            or self.limit is not None or self.skip is not None
        )

    def filter_only(self) -> "QuerySpec":
        """Same filter, every other slot dropped (count and bulk operations)."""
        return QuerySpec(filter=self.filter)


def translate(raw_params: Mapping[str, Any] | None) -> QuerySpec:
    """Translate raw query parameters into a QuerySpec. Never raises."""
    if not raw_params:
        return QuerySpec()

    filters: dict[str, dict[str, Any]] = {}
    fields: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    sort: tuple[tuple[str, int], ...] = ()
    limit = skip = None

    for name, raw in raw_params.items():
        if not isinstance(name, str) or not name:
            continue
        if name == "limit":
            limit = _parse_count(raw)
        elif name == "skip":
            skip = _parse_count(raw)
        elif name == "sort":
            sort = _parse_sort(raw)
        elif name == "fields":
            fields, exclude = _parse_fields(raw)
        else:
            term = _parse_term(name, raw)
            if term is not None:
                field_name, op, value = term
                filters.setdefault(field_name, {})[op] = value

    return QuerySpec(
        filter=filters, fields=fields, exclude=exclude,
        sort=sort, limit=limit, skip=skip,
    )


def split_operator(name: str) -> tuple[str, str | None]:
    """Split `field__op` into (field, op). op is None for plain equality names."""
    head, sep, tail = name.rpartition(OPERATOR_SEPARATOR)
    if not sep or not head.strip("_"):
        return name, None
    return head, tail


# ─── Parsers ─────────────────────────────────────────────────────

def _last(raw: Any) -> Any:
    if isinstance(raw, (list, tuple)):
        return raw[-1] if raw else None
    return raw


def _as_list(raw: Any) -> list[str]:
    values = raw if isinstance(raw, (list, tuple)) else [raw]
    out = []
    for value in values:
        if value is None:
            continue
        out.extend(part for part in str(value).split(",") if part != "")
    return out


def _parse_count(raw: Any) -> int | None:
    value = _last(raw)
    try:
        count = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None


def _names(raw: Any) -> list[str]:
    return [name.strip() for name in _as_list(raw) if name.strip()]


def _parse_sort(raw: Any) -> tuple[tuple[str, int], ...]:
    keys = []
    for name in _names(raw):
        direction = 1
        if name[0] in "-+":
            direction = -1 if name[0] == "-" else 1
            name = name[1:].strip()
        if name:
            keys.append((name, direction))
    return tuple(keys)


def _parse_fields(raw: Any) -> tuple[tuple[str, ...], tuple[str, ...]]:
    included, excluded = [], []
    for name in _names(raw):
        if name.startswith("-"):
            if name[1:]:
                excluded.append(name[1:])
        else:
            included.append(name)
    return tuple(included), tuple(excluded)


def _parse_term(name: str, raw: Any) -> tuple[str, str, Any] | None:
    field_name, op = split_operator(name)
    if not field_name:
        return None
    if op is None:
        if isinstance(raw, (list, tuple)):
            values = [str(v) for v in raw if v is not None]
            if len(values) == 1:
                return field_name, "$eq", values[0]
            return field_name, "$in", values
        return field_name, "$eq", raw
    if op not in OPERATORS:
        return None
    if op in LIST_OPERATORS:
        return field_name, f"${op}", _as_list(raw)
    value = _last(raw)
    if op == "exists":
        return field_name, "$exists", str(value).strip().lower() in TRUTHY
    return field_name, f"${op}", value
