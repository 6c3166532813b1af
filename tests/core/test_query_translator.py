"""Query Translator: tests for query-string -> QuerySpec translation.

Tests cover:
    - Absent parameters map to an empty QuerySpec
    - Reserved names route to limit/skip/sort/fields, never to the filter
    - Malformed limit/skip are ignored
    - Operator suffixes, unknown operators and version-style names
    - Field names containing `__` need an explicit operator
    - Multi-valued parameters become $in terms
"""

from docbind.core.query_translator import QuerySpec, split_operator, translate


# ─── Empty / reserved ────────────────────────────────────────────

def test_no_params_is_unconstrained():
    assert translate({}) == QuerySpec()
    assert translate(None).is_empty


def test_equality_param_becomes_filter_term():
    spec = translate({"title": "X"})
    assert spec.filter == {"title": {"$eq": "X"}}
    assert spec.limit is None
    assert spec.skip is None


def test_limit_and_skip_parse_as_ints():
    spec = translate({"limit": "10", "skip": "5"})
    assert spec.limit == 10
    assert spec.skip == 5
    assert spec.filter == {}


def test_malformed_limit_and_skip_are_ignored():
    spec = translate({"limit": "ten", "skip": "-3"})
    assert spec.limit is None
    assert spec.skip is None


def test_reserved_names_never_reach_filter():
    spec = translate({"limit": "x", "sort": "", "fields": "", "skip": "y"})
    assert spec.filter == {}


def test_sort_parses_direction():
    spec = translate({"sort": "title,-author,+year"})
    assert spec.sort == (("title", 1), ("author", -1), ("year", 1))


def test_fields_split_into_included_and_excluded():
    spec = translate({"fields": "title,-author"})
    assert spec.fields == ("title",)
    assert spec.exclude == ("author",)


# ─── Operators ───────────────────────────────────────────────────

def test_operator_suffix_becomes_operator_term():
    spec = translate({"year__gte": "1800", "year__lt": "1900"})
    assert spec.filter == {"year": {"$gte": "1800", "$lt": "1900"}}


def test_list_operators_split_on_commas():
    spec = translate({"author__in": "Tolstoy,Gogol"})
    assert spec.filter == {"author": {"$in": ["Tolstoy", "Gogol"]}}


def test_exists_coerces_to_bool():
    assert translate({"isbn__exists": "true"}).filter == {"isbn": {"$exists": True}}
    assert translate({"isbn__exists": "nope"}).filter == {"isbn": {"$exists": False}}


def test_unknown_operator_is_dropped():
    spec = translate({"title__sounds_like": "X", "author": "Y"})
    assert spec.filter == {"author": {"$eq": "Y"}}


def test_double_underscore_field_reads_as_operator():
    assert translate({"my__field": "x"}).filter == {}
    assert translate({"my__field__eq": "x"}).filter == {"my__field": {"$eq": "x"}}


def test_version_key_is_a_plain_field():
    assert translate({"__v": "0"}).filter == {"__v": {"$eq": "0"}}
    assert translate({"__v__gt": "0"}).filter == {"__v": {"$gt": "0"}}


def test_multi_valued_param_becomes_in_term():
    spec = translate({"author": ["Tolstoy", "Gogol"]})
    assert spec.filter == {"author": {"$in": ["Tolstoy", "Gogol"]}}


def test_single_item_list_stays_equality():
    spec = translate({"author": ["Tolstoy"]})
    assert spec.filter == {"author": {"$eq": "Tolstoy"}}


def test_split_operator():
    assert split_operator("title") == ("title", None)
    assert split_operator("title__ne") == ("title", "ne")
    assert split_operator("__v") == ("__v", None)


def test_filter_only_drops_other_slots():
    spec = translate({"title": "X", "limit": "2", "sort": "title"}).filter_only()
    assert spec == QuerySpec(filter={"title": {"$eq": "X"}})
