"""Filter Matching: tests for filter evaluation, sort and projection.

Tests cover:
    - Query strings cast against stored value types
    - Garbage values and unknown operators never raise, they just don't match
    - Sort order with missing values and descending keys
    - Projection keeps the id key
"""

from docbind.core.filter_match import matches, project, run_query, sort_documents
from docbind.core.query_translator import QuerySpec, translate

BOOKS = [
    {"_id": "a", "title": "Anna Karenina", "author": "Tolstoy", "year": 1878, "__v": 0},
    {"_id": "b", "title": "Dead Souls", "author": "Gogol", "year": 1842, "__v": 2},
    {"_id": "c", "title": "The Idiot", "author": "Dostoevsky", "year": 1869, "__v": 1},
    {"_id": "d", "title": "Untitled", "__v": 0},
]


def _ids(docs):
    return [d["_id"] for d in docs]


def test_string_equality():
    assert matches(BOOKS[0], {"author": {"$eq": "Tolstoy"}})
    assert not matches(BOOKS[1], {"author": {"$eq": "Tolstoy"}})


def test_query_string_cast_to_int():
    assert matches(BOOKS[0], {"year": {"$eq": "1878"}})
    assert matches(BOOKS[0], {"__v": {"$eq": "0"}})


def test_comparison_operators():
    found = run_query(BOOKS, translate({"year__gte": "1850"}), "_id")
    assert _ids(found) == ["a", "c"]


def test_garbage_value_does_not_match_or_raise():
    assert not matches(BOOKS[0], {"year": {"$gt": "not-a-number"}})
    assert not matches(BOOKS[0], {"title": {"$regex": "(["}})


def test_unknown_operator_does_not_match():
    assert not matches(BOOKS[0], {"title": {"$sounds_like": "Anna"}})


def test_missing_field():
    assert not matches(BOOKS[3], {"author": {"$eq": "Tolstoy"}})
    assert matches(BOOKS[3], {"author": {"$exists": False}})
    assert matches(BOOKS[3], {"author": {"$ne": "Tolstoy"}})


def test_in_and_nin():
    assert _ids(run_query(BOOKS, translate({"author__in": "Gogol,Tolstoy"}), "_id")) == ["a", "b"]
    assert _ids(run_query(BOOKS, translate({"author__nin": "Gogol,Tolstoy"}), "_id")) == ["c", "d"]


def test_regex():
    assert matches(BOOKS[2], {"title": {"$regex": "^The"}})


def test_plain_value_is_equality():
    assert matches(BOOKS[1], {"author": "Gogol"})


def test_sort_descending_with_missing_values():
    ordered = sort_documents(list(BOOKS), [("year", -1)])
    assert _ids(ordered) == ["a", "c", "b", "d"]


def test_skip_and_limit_after_sort():
    found = run_query(BOOKS, QuerySpec(sort=(("title", 1),), skip=1, limit=2), "_id")
    assert _ids(found) == ["b", "c"]


def test_projection_keeps_id():
    assert project(BOOKS[0], ["title"], [], "_id") == {"_id": "a", "title": "Anna Karenina"}
    assert project(BOOKS[0], [], ["title", "year", "_id"], "_id") == {
        "_id": "a", "author": "Tolstoy", "__v": 0,
    }
