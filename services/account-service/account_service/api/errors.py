"""Translation of domain and validation failures into JSON error responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.errors import AccountServiceError, StoreUnavailableError

logger = logging.getLogger(__name__)


async def account_error_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    """Render an expected failure as ``{"status": "error", "message": ...}``."""
    if exc.status_code >= 500:
        # Only internal failures are logged loudly; the cause stays server-side.
        logger.error(
            "internal failure on %s %s", request.method, request.url.path, exc_info=exc
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg", "invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": "Validation failed", "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=StoreUnavailableError().to_payload(),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AccountServiceError, account_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
