"""
Exception handlers for the FastAPI application.

Every error response shares one envelope:
{"error": true, "code": ..., "message": ..., "status_code": ..., "details": ...}
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import OrderError

logger = logging.getLogger(__name__)


def _envelope(status_code: int, code: str, message, details=None) -> dict:
    content = {
        "error": True,
        "code": code,
        "message": message,
        "status_code": status_code,
    }
    if details:
        content["details"] = details
    return content


async def order_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map typed order failures to their HTTP status."""
    if not isinstance(exc, OrderError):
        return await global_exception_handler(request, exc)

    logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.status_code, exc.code, exc.message, exc.details),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_exc = exc if isinstance(exc, HTTPException) else HTTPException(status_code=500, detail=str(exc))
    return JSONResponse(
        status_code=http_exc.status_code,
        content=_envelope(http_exc.status_code, "http_error", http_exc.detail),
        headers=http_exc.headers,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Flatten request validation errors into field/message pairs."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_envelope(status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", str(exc)),
        )

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_envelope(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation error",
            {"errors": errors},
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error"
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderError, order_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
