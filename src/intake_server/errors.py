"""Global exception handlers — map workflow exceptions to HTTP responses.

Routes only handle the happy path; every error raised below them lands
here and becomes a structured ``{"detail": ...}`` body.  Nothing is allowed
to crash the process.

    ValidationError            → 422, message returned as-is
    NotFound                   → 404
    StorageFailure / SQLAlchemyError → 503
    other ValueError           → 400
    anything else              → 500
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from intake_workflow.errors import NotFound, StorageFailure, ValidationError

logger = logging.getLogger(__name__)


def _route_path(request: Request) -> str:
    """Matched route template; the raw path can carry a session token."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


# Client-safe messages keyed by HTTP status code.  Internal details stay
# in the server log.
_SAFE_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    500: "Internal server error",
    503: "Storage unavailable, please retry",
}


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Validation messages name fields only, so they are safe to return."""
    logger.info("ValidationError at %s: %s", _route_path(request), exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    logger.info("NotFound at %s: %s", _route_path(request), exc)
    return JSONResponse(status_code=404, content={"detail": _SAFE_MESSAGES[404]})


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """``StorageFailure`` and raw ``SQLAlchemyError`` both end up here."""
    logger.error("Storage failure at %s: %s", _route_path(request), exc, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": _SAFE_MESSAGES[503]})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.warning("ValueError at %s: %s", _route_path(request), exc)
    return JSONResponse(status_code=400, content={"detail": _SAFE_MESSAGES[400]})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", _route_path(request))
    return JSONResponse(status_code=500, content={"detail": _SAFE_MESSAGES[500]})


def register_error_handlers(app: FastAPI) -> None:
    """Install every handler.  Starlette resolves them along the exception MRO."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(StorageFailure, storage_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)
