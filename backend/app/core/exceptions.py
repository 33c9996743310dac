"""
Domain exceptions and their HTTP mapping.

Services raise these; the API layer turns them into ``{"error": ...}``
responses. Store failures keep their details in the server log and reach
the client as a generic message.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


class KhataError(Exception):
    """Base class for all errors raised by the khata services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(KhataError):
    """Bad or missing input. Raised before any query is issued."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(KhataError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(KhataError):
    """Mail relay settings are missing."""


class DeliveryError(KhataError):
    """The mail relay rejected the message or could not be reached."""


class StoreError(KhataError):
    """Any other persistence failure."""


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def khata_error_handler(request: Request, exc: KhataError) -> JSONResponse:
    if isinstance(exc, StoreError):
        # Details were logged where the store error was caught
        return error_response(exc.status_code, GENERIC_SERVER_ERROR)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON and wrong field types are client errors (400), not 422."""
    errors = exc.errors()
    message = "invalid JSON"
    if errors:
        first = errors[0]
        if first.get("type") != "json_invalid":
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    logger.info(f"Bad request on {request.url.path}: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Never expose stack traces or SQL errors to clients."""
    logger.error(
        f"Internal server error: {type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(KhataError, khata_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
