"""Resource: one immutable binding, nine generated request handlers.

Invariants:
    - Every handler is `async (RequestLike) -> HandlerResponse` and never raises:
      DocbindError becomes an error envelope, anything else a StoreFailureError envelope
    - Single-document handlers read the binding's id token from the path parameters;
      a missing token is a ConfigurationError (wiring bug), never a NotFound
    - Bulk handlers never raise NotFound: zero matches is success
    - Single-document mutations answer with the post-operation document
    - The binding is read-only; handlers share no mutable state

Design Decisions:
    - Explicit kind -> factory dict over getattr: every mapping visible in one place
    - Factories are module-level functions taking the binding, so a host can build
      a single handler without a Resource instance
    - Default id token follows the model name (`Book` -> `bookId`)
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from docbind.core import envelope
from docbind.core.domain_types import OperationKind, StatusCodes
from docbind.core.errors import (
    ConfigurationError, DocbindError, ErrorContext, NotFoundError,
    StoreFailureError, ValidationFailureError,
)
from docbind.core.merge_patch import build_patch, expected_version
from docbind.core.query_translator import translate
from docbind.core.store_protocols import DocumentStore, RequestLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerResponse:
    """Status code plus envelope body, ready for any host router to send."""
    status_code: int
    body: dict


@dataclass(frozen=True)
class ResourceBinding:
    """Document store + id token + status table for one collection."""
    store: DocumentStore
    id_token: str
    name: str
    status_codes: StatusCodes


Handler = Callable[[RequestLike], Awaitable[HandlerResponse]]
Operation = Callable[[ResourceBinding, RequestLike], Awaitable[dict]]


def default_id_token(model_name: str) -> str:
    """`Book` -> `bookId`."""
    if not model_name:
        return "docId"
    return f"{model_name[0].lower()}{model_name[1:]}Id"


# ─── Handler Boundary ────────────────────────────────────────────

def _guard(binding: ResourceBinding, kind: OperationKind, operation: Operation) -> Handler:
    """Wrap an operation so that no exception crosses the handler boundary."""

    async def handler(request: RequestLike) -> HandlerResponse:
        try:
            body = await operation(binding, request)
        except DocbindError as exc:
            return _failure(binding, kind, exc)
        except Exception as exc:
            logger.error(
                f"Unexpected store failure in {binding.name}.{kind.value}: {exc}",
                exc_info=True,
                extra={"resource": binding.name, "operation": kind.value},
            )
            return _failure(
                binding, kind, StoreFailureError("unexpected error", kind.value),
            )
        return HandlerResponse(binding.status_codes.for_success(kind), body)

    handler.__name__ = f"{binding.name}_{kind.value}"
    handler.__qualname__ = handler.__name__
    return handler


def _failure(
    binding: ResourceBinding, kind: OperationKind, exc: DocbindError,
) -> HandlerResponse:
    exc.context.resource = exc.context.resource or binding.name
    exc.context.operation = exc.context.operation or kind.value
    extra = {
        "resource": binding.name,
        "operation": kind.value,
        "document_id": exc.context.document_id,
        "error_code": exc.code,
    }
    if exc.client_facing:
        logger.warning(f"{binding.name}.{kind.value}: {exc.message}", extra=extra)
    else:
        logger.error(f"{binding.name}.{kind.value}: {exc.message}", extra=extra)
    return HandlerResponse(binding.status_codes.for_error(exc), envelope.fail(exc))


def _require_id(binding: ResourceBinding, request: RequestLike) -> str:
    doc_id = request.path_param(binding.id_token)
    if doc_id is None or doc_id == "":
        raise ConfigurationError(binding.id_token)
    return str(doc_id)


def _require_document(request: RequestLike) -> Mapping[str, Any]:
    payload = request.body()
    if not isinstance(payload, Mapping):
        raise ValidationFailureError(
            "Request body must be a JSON object",
            details=[{"field": "body", "message": "expected an object", "type": "dict_type"}],
        )
    return payload


def _not_found(binding: ResourceBinding, doc_id: str) -> NotFoundError:
    return NotFoundError(binding.name, doc_id, ErrorContext(resource=binding.name))


# ─── Operations ──────────────────────────────────────────────────

async def _create(binding: ResourceBinding, request: RequestLike) -> dict:
    document = await binding.store.insert(_require_document(request))
    logger.debug(
        f"Created {binding.name}",
        extra={"resource": binding.name, "document_id": document.get(binding.store.id_key)},
    )
    return envelope.ok(document)


async def _read_doc(binding: ResourceBinding, request: RequestLike) -> dict:
    doc_id = _require_id(binding, request)
    document = await binding.store.find_one(doc_id)
    if document is None:
        raise _not_found(binding, doc_id)
    return envelope.ok(document)


async def _read_docs(binding: ResourceBinding, request: RequestLike) -> dict:
    query = translate(request.query_params())
    return envelope.ok(await binding.store.find_many(query))


async def _count_docs(binding: ResourceBinding, request: RequestLike) -> dict:
    query = translate(request.query_params()).filter_only()
    return envelope.ok(await binding.store.count(query.filter))


async def _patch_doc(binding: ResourceBinding, request: RequestLike) -> dict:
    doc_id = _require_id(binding, request)
    store = binding.store
    patch = build_patch(
        _require_document(request), id_key=store.id_key, version_key=store.version_key,
    )
    document = await store.update_one(doc_id, patch)
    if document is None:
        raise _not_found(binding, doc_id)
    return envelope.ok(document)


async def _patch_docs(binding: ResourceBinding, request: RequestLike) -> dict:
    store = binding.store
    query = translate(request.query_params()).filter_only()
    patch = build_patch(
        _require_document(request), id_key=store.id_key, version_key=store.version_key,
    )
    updated = await store.update_many(query.filter, patch)
    logger.info(
        f"Patched {updated} {binding.name} document(s)",
        extra={"resource": binding.name, "operation": "patch_docs", "count": updated},
    )
    return envelope.meta_only()


async def _put_doc(binding: ResourceBinding, request: RequestLike) -> dict:
    doc_id = _require_id(binding, request)
    store = binding.store
    payload = _require_document(request)
    expected = expected_version(payload, store.version_key)
    fields = {
        k: v for k, v in payload.items() if k not in (store.id_key, store.version_key)
    }
    document = await store.replace_one(doc_id, fields, expected_version=expected)
    if document is None:
        raise _not_found(binding, doc_id)
    return envelope.ok(document)


async def _remove_doc(binding: ResourceBinding, request: RequestLike) -> dict:
    doc_id = _require_id(binding, request)
    if not await binding.store.delete_one(doc_id):
        raise _not_found(binding, doc_id)
    return envelope.meta_only()


async def _remove_docs(binding: ResourceBinding, request: RequestLike) -> dict:
    query = translate(request.query_params()).filter_only()
    removed = await binding.store.delete_many(query.filter)
    logger.info(
        f"Removed {removed} {binding.name} document(s)",
        extra={"resource": binding.name, "operation": "remove_docs", "count": removed},
    )
    return envelope.meta_only()


# ─── Handler Factories ───────────────────────────────────────────

def build_create_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.CREATE, _create)


def build_read_doc_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.READ_DOC, _read_doc)


def build_read_docs_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.READ_DOCS, _read_docs)


def build_count_docs_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.COUNT_DOCS, _count_docs)


def build_patch_doc_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.PATCH_DOC, _patch_doc)


def build_patch_docs_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.PATCH_DOCS, _patch_docs)


def build_put_doc_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.PUT_DOC, _put_doc)


def build_remove_doc_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.REMOVE_DOC, _remove_doc)


def build_remove_docs_handler(binding: ResourceBinding) -> Handler:
    return _guard(binding, OperationKind.REMOVE_DOCS, _remove_docs)


# Adding an operation kind requires editing this dict
HANDLER_FACTORIES: dict[OperationKind, Callable[[ResourceBinding], Handler]] = {
    OperationKind.CREATE: build_create_handler,
    OperationKind.READ_DOC: build_read_doc_handler,
    OperationKind.READ_DOCS: build_read_docs_handler,
    OperationKind.COUNT_DOCS: build_count_docs_handler,
    OperationKind.PATCH_DOC: build_patch_doc_handler,
    OperationKind.PATCH_DOCS: build_patch_docs_handler,
    OperationKind.PUT_DOC: build_put_doc_handler,
    OperationKind.REMOVE_DOC: build_remove_doc_handler,
    OperationKind.REMOVE_DOCS: build_remove_docs_handler,
}


class Resource:
    """Binds one document collection to the nine CRUD/query handler kinds."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        id_token: str | None = None,
        name: str | None = None,
        status_codes: StatusCodes | Mapping[str, int] | None = None,
    ):
        if not isinstance(status_codes, StatusCodes):
            status_codes = StatusCodes.model_validate(dict(status_codes or {}))
        self.binding = ResourceBinding(
            store=store,
            id_token=id_token or default_id_token(store.model_name),
            name=name or store.model_name,
            status_codes=status_codes,
        )

    @property
    def id_token(self) -> str:
        return self.binding.id_token

    def handler(self, kind: OperationKind | str) -> Handler:
        """Build the handler for one operation kind."""
        return HANDLER_FACTORIES[OperationKind(kind)](self.binding)

    def create_doc(self) -> Handler:
        return self.handler(OperationKind.CREATE)

    def read_doc(self) -> Handler:
        return self.handler(OperationKind.READ_DOC)

    def read_docs(self) -> Handler:
        return self.handler(OperationKind.READ_DOCS)

    def count_docs(self) -> Handler:
        return self.handler(OperationKind.COUNT_DOCS)

    def patch_doc(self) -> Handler:
        return self.handler(OperationKind.PATCH_DOC)

    def patch_docs(self) -> Handler:
        return self.handler(OperationKind.PATCH_DOCS)

    def put_doc(self) -> Handler:
        return self.handler(OperationKind.PUT_DOC)

    def remove_doc(self) -> Handler:
        return self.handler(OperationKind.REMOVE_DOC)

    def remove_docs(self) -> Handler:
        return self.handler(OperationKind.REMOVE_DOCS)
