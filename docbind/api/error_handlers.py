"""Error Handlers: global exception handlers that answer with failure envelopes.

Invariants:
    - DocbindError -> envelope with the error's default status
    - RequestValidationError -> envelope with field-level details
    - Exception (catch-all) -> envelope that never leaks internal details

Design Decisions:
    - Resource handlers already convert their own failures; these handlers cover
      routes the host adds around them and anything escaping an adapter
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docbind.core import envelope
from docbind.core.errors import (
    DocbindError, ErrorCategory, ErrorSeverity, ValidationFailureError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_docbind_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_docbind_error_handler(app: FastAPI) -> None:

    @app.exception_handler(DocbindError)
    async def docbind_error_handler(request: Request, exc: DocbindError):
        logger.error(
            f"DocbindError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=envelope.fail(exc),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope.fail(_build_validation_failure(exc)),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope.fail(DocbindError(
                "An unexpected error occurred", "INTERNAL_ERROR",
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            )),
        )


def _build_validation_failure(exc: RequestValidationError) -> ValidationFailureError:
    return ValidationFailureError(
        "Invalid request data",
        details=[
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    )
