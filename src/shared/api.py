"""HTTP error mapping shared by the application and the API tests.

Protean's handlers cover validation (400), missing objects (404) and
invalid state (409). The saga errors are added on top, with the same
``{"error": ...}`` body.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from shared.errors import (
    ConcurrencyConflict,
    InsufficientFundsError,
    InsufficientStockError,
    RemoteTimeoutError,
    TransientInfraError,
)

_STATUS_CODES = {
    InsufficientStockError: 409,
    InsufficientFundsError: 409,
    ConcurrencyConflict: 409,
    RemoteTimeoutError: 504,
    TransientInfraError: 503,
}


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    async def fulfillment_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = next(code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls))
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    for exc_class in _STATUS_CODES:
        app.add_exception_handler(exc_class, fulfillment_error_handler)
