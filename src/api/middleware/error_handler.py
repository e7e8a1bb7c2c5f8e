"""Global exception handling.

Every error leaves the API as ``{"error", "message", "request_id"}``.
"""

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.exceptions import PersistenceError, UnauthorizedError

logger = structlog.get_logger()

_HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


def _error(status_code: int, error: str, message: str, request_id: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "request_id": request_id, **extra},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")

    if isinstance(exc, UnauthorizedError):
        logger.warning("unauthorized", request_id=request_id, error=str(exc))
        return _error(401, "unauthorized", str(exc), request_id)

    if isinstance(exc, PersistenceError):
        logger.error(
            "persistence_failed", request_id=request_id, error=str(exc), details=exc.details
        )
        return _error(500, "internal_server_error", str(exc), request_id, details=exc.details)

    if isinstance(exc, ValueError):
        logger.warning("bad_request", request_id=request_id, error=str(exc))
        return _error(400, "bad_request", str(exc), request_id)

    if isinstance(exc, PermissionError):
        logger.warning("forbidden", request_id=request_id, error=str(exc))
        return _error(403, "forbidden", str(exc), request_id)

    if isinstance(exc, LookupError):
        logger.warning("not_found", request_id=request_id, error=str(exc))
        return _error(404, "not_found", str(exc), request_id)

    logger.exception("unhandled_exception", request_id=request_id, error=str(exc))
    return _error(500, "internal_server_error", "An unexpected error occurred", request_id)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    error = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    response = _error(exc.status_code, error, str(exc.detail), request_id)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning("request_validation_failed", request_id=request_id, errors=exc.errors())
    return _error(
        400,
        "bad_request",
        "Invalid request body or parameters",
        request_id,
        details=jsonable_errors(exc),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


HANDLED_EXCEPTIONS: tuple[type[Exception], ...] = (
    UnauthorizedError,
    PersistenceError,
    ValueError,
    PermissionError,
    LookupError,
)
