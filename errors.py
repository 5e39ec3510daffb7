"""
Error taxonomy shared by the store, the matching engine and the HTTP layer.

Every error carries the HTTP status it maps to; the handlers registered in
``register_error_handlers`` render all of them as ``{"message": ...}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    public_message = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__

    @property
    def client_message(self) -> str:
        return self.public_message or self.message


class ValidationError(AppError):
    """Missing or malformed caller input."""
    status_code = 400


class AuthError(AppError):
    """Missing/invalid session or credentials."""
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class UpstreamError(AppError):
    """The oracle call failed, timed out or returned unusable content."""
    status_code = 500
    public_message = "The AI service is unavailable right now. Please try again."


class PersistenceError(AppError):
    status_code = 500


def _format_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, UpstreamError):
            logger.error(f"Upstream failure on {request.url.path}: {exc.message}")
        elif exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.client_message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": f"Invalid request: {_format_request_errors(exc)}"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown routes, wrong methods and any HTTPException raised by the framework
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"message": "Something went wrong. Please try again."},
        )
