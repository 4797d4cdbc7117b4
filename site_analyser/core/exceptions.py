# site_analyser/core/exceptions.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"


class AnalyserError(Exception):
    """Base class for errors that end up in an `{"error": ...}` response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidURLError(AnalyserError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuditError(AnalyserError):
    """Lighthouse or its browser process failed. Fatal for the request."""


class InspectionError(AnalyserError):
    """Technical inspection failed. The pipeline recovers from this one."""


class GenerationError(AnalyserError):
    """The language model call failed. Fatal for the request."""


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


_HTTP_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
}


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AnalyserError)
    async def analyser_exception_handler(request: Request, exc: AnalyserError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = _HTTP_MESSAGES.get(exc.status_code) or str(exc.detail) or "Error"
        return error_response(message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response("Request body must be a JSON object with a 'url' field", status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return error_response(str(exc) or GENERIC_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
