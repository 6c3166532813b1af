"""FastAPI Adapter: Starlette requests in, handler responses out.

Invariants:
    - StarletteRequest implements RequestLike; the body is parsed once, before the handler runs
    - A malformed JSON body is answered with a 400 validation envelope; the handler never runs
    - An empty body reads as None (handlers that need a document reject it themselves)
    - Repeated query parameters arrive as lists, single ones as strings

Design Decisions:
    - register_resource is a convenience: the caller may always wire endpoint(handler)
      onto paths and verbs of its own choosing
    - Collection routes registered before `/{id}` routes so `/count` is not read as an id
"""

import json
import logging
from typing import Any, Mapping

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from docbind.core import envelope
from docbind.core.errors import ValidationFailureError
from docbind.services.resource import Handler, Resource

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class StarletteRequest:
    """RequestLike over a Starlette/FastAPI request with a pre-parsed body."""

    def __init__(self, request: Request, payload: Any = None):
        self._request = request
        self._payload = payload

    @classmethod
    async def from_request(cls, request: Request) -> "StarletteRequest":
        payload = None
        if request.method in BODY_METHODS:
            raw = await request.body()
            if raw.strip():
                try:
                    payload = json.loads(raw)
                except ValueError as e:
                    raise ValidationFailureError(
                        "Malformed JSON body",
                        details=[{"field": "body", "message": str(e), "type": "json_invalid"}],
                    ) from None
        return cls(request, payload)

    def path_param(self, name: str) -> str | None:
        value = self._request.path_params.get(name)
        return None if value is None else str(value)

    def query_params(self) -> Mapping[str, Any]:
        params: dict[str, Any] = {}
        for key, value in self._request.query_params.multi_items():
            if key in params:
                existing = params[key]
                params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
            else:
                params[key] = value
        return params

    def body(self) -> Any:
        return self._payload


def endpoint(handler: Handler):
    """Turn a docbind handler into a FastAPI endpoint."""

    async def route(request: Request) -> JSONResponse:
        try:
            adapted = await StarletteRequest.from_request(request)
        except ValidationFailureError as exc:
            logger.warning(
                f"Rejected body on {request.url.path}: {exc.message}",
                extra={"path": request.url.path, "error_code": exc.code},
            )
            return JSONResponse(status_code=exc.http_status, content=envelope.fail(exc))
        response = await handler(adapted)
        return JSONResponse(status_code=response.status_code, content=response.body)

    route.__name__ = getattr(handler, "__name__", "docbind_endpoint")
    return route


def register_resource(
    router: APIRouter, path: str, resource: Resource, *, tags: list[str] | None = None,
) -> APIRouter:
    """Wire all nine handlers with the conventional collection/document layout."""
    path = path.rstrip("/")
    doc_path = f"{path}/{{{resource.id_token}}}"
    routes = [
        (path, "POST", resource.create_doc()),
        (path, "GET", resource.read_docs()),
        (f"{path}/count", "GET", resource.count_docs()),
        (path, "PATCH", resource.patch_docs()),
        (path, "DELETE", resource.remove_docs()),
        (doc_path, "GET", resource.read_doc()),
        (doc_path, "PATCH", resource.patch_doc()),
        (doc_path, "PUT", resource.put_doc()),
        (doc_path, "DELETE", resource.remove_doc()),
    ]
    for route_path, method, handler in routes:
        router.add_api_route(
            route_path, endpoint(handler), methods=[method], tags=tags,
            name=f"{handler.__name__}_{method.lower()}",
        )
    return router
