"""Domain Types: operation kinds, the document alias and the status-code table.

Invariants:
    - OperationKind has exactly nine members, one per handler factory
    - Documents are plain mappings: no fixed field set is known ahead of time
    - StatusCodes maps every ErrorCategory to a code

Design Decisions:
    - str Enums: operation names serialize into logs and error contexts as-is
    - StatusCodes as a pydantic model: bindings accept a dict or an instance
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from docbind.core.errors import DocbindError, ErrorCategory


Document = dict[str, Any]


# ─── Enums ───────────────────────────────────────────────────────

class OperationKind(str, Enum):
    """The nine operations a Resource can generate handlers for."""
    CREATE = "create"
    READ_DOC = "read_doc"
    READ_DOCS = "read_docs"
    COUNT_DOCS = "count_docs"
    PATCH_DOC = "patch_doc"
    PATCH_DOCS = "patch_docs"
    PUT_DOC = "put_doc"
    REMOVE_DOC = "remove_doc"
    REMOVE_DOCS = "remove_docs"


# ─── Status Codes ────────────────────────────────────────────────

class StatusCodes(BaseModel):
    """HTTP status codes a binding answers with."""
    model_config = ConfigDict(frozen=True)

    ok: int = 200
    created: int = 201
    bad_request: int = 400
    not_found: int = 404
    conflict: int = 409
    server_error: int = 500

    def for_success(self, kind: OperationKind) -> int:
        return self.created if kind is OperationKind.CREATE else self.ok

    def for_error(self, error: DocbindError) -> int:
        if error.category is ErrorCategory.VALIDATION:
            return self.bad_request
        if error.category is ErrorCategory.RESOURCE_NOT_FOUND:
            return self.not_found
        if error.category is ErrorCategory.CONFLICT:
            return self.conflict
        return self.server_error
