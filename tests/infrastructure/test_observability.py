"""Structured Logging: tests for the JSON formatter.

Tests cover:
    - Base fields always present
    - Extra fields surfaced only when set
"""

import json
import logging

from docbind.infrastructure.observability import JSONFormatter


def _record(**extra):
    record = logging.LogRecord(
        "docbind.services.resource", logging.WARNING, __file__, 1,
        "Book.read_doc: Book 'abc' not found", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "WARNING"
    assert log["logger"] == "docbind.services.resource"
    assert log["message"] == "Book.read_doc: Book 'abc' not found"
    assert "resource" not in log


def test_json_formatter_extra_fields():
    log = json.loads(JSONFormatter().format(_record(
        resource="Book", operation="read_doc", document_id="abc",
        error_code="RESOURCE_NOT_FOUND",
    )))
    assert log["resource"] == "Book"
    assert log["operation"] == "read_doc"
    assert log["document_id"] == "abc"
    assert log["error_code"] == "RESOURCE_NOT_FOUND"
