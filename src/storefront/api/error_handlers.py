"""Exception handlers mapping storefront errors onto HTTP responses.

- NotInitializedError → 503, the cart can be initialized again
- InvalidProductError / InvalidFilterError → 422
- StoreError → 502, the store of record failed
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.errors import (
    InvalidFilterError,
    InvalidProductError,
    NotInitializedError,
    StoreError,
    StorefrontError,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[StorefrontError], int]] = [
    (NotInitializedError, 503),
    (InvalidProductError, 422),
    (InvalidFilterError, 422),
    (StoreError, 502),
]


def status_for(exc: StorefrontError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.warning if status_code < 500 or status_code == 503 else logger.error
        log("Request failed", path=request.url.path, error=type(exc).__name__, detail=str(exc))
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )
