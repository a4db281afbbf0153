"""
Exception handlers.

Every failure leaves the API as ``{"detail": ..., "code": ...}`` so clients
can branch on ``code`` (NOT_FOUND, VALIDATION_ERROR, CONFLICT, INTERNAL_ERROR)
without parsing messages.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.config.logging import api_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import AppException, ValidationError


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Domain errors already logged themselves on construction."""
    return _error_response(exc.status_code, str(exc.detail), exc.code)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are reported as 400, not 422."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{location}: {message}" if location else message
    else:
        detail = "Invalid request"
    logger.info("Request validation failed", path=request.url.path, detail=detail)
    return _error_response(status.HTTP_400_BAD_REQUEST, detail, ValidationError.code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: anything unexpected is an INTERNAL_ERROR."""
    logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=exc)
    detail = str(exc) if settings.debug else "An unexpected error occurred"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
