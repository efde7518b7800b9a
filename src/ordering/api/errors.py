"""Exception-to-HTTP mapping for the Ordering API.

Every error body has the shape ``{"kind": ..., "error": ...}`` where
``kind`` is the stable name from ``ordering.errors``. Unexpected failures
are logged and answered with a generic message.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import error_kind

logger = structlog.get_logger(__name__)


def _error(status_code: int, kind: str, error) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"kind": kind, "error": error})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's standard handlers, then the Ordering overrides."""
    register_exception_handlers(app)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, error_kind(exc), exc.messages)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _error(400, "validation", str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "validation", jsonable_encoder(exc.errors()))

    @app.exception_handler(ObjectNotFoundError)
    async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return _error(404, "not_found", str(exc))

    @app.exception_handler(ExpectedVersionError)
    async def conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        logger.warning("Concurrent modification", path=request.url.path, error=str(exc))
        return _error(409, error_kind(exc), "The resource was modified concurrently. Please retry.")

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path, method=request.method)
        return _error(500, "server_error", "Server error")
