"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes, HTTP_STATUS_BY_CODE
from core.exceptions import InvoiceError, ValidationFailure

logger = logging.getLogger(__name__)


def error_json(code: str, message: str, details: list[str] | None = None) -> JSONResponse:
    """Error envelope with the HTTP status that belongs to its code."""
    return JSONResponse(
        status_code=HTTP_STATUS_BY_CODE.get(code, 400),
        content=error_response(code, message, details).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(InvoiceError)
    async def invoice_error_handler(request: Request, exc: InvoiceError):
        details = exc.errors if isinstance(exc, ValidationFailure) else None
        return error_json(exc.code, str(exc), details)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return error_json(ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]
        return error_json(ErrorCodes.VALIDATION_ERROR, "Request payload is invalid", details)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return error_json(ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
