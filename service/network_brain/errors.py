"""
Error taxonomy and the JSON error envelope.

Every flow raises one of these; the handlers registered on the app turn
them into `{"error": message}` with the matching status code.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from network_brain.logging_config import logger


class NetworkBrainError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NetworkBrainError):
    """Missing required input, or required fields missing from LLM output."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, missing_fields: Optional[list[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class NotFoundError(NetworkBrainError):
    status_code = status.HTTP_404_NOT_FOUND


class PreconditionError(NetworkBrainError):
    """The record exists but is not in a usable state (e.g. no embedding)."""

    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(NetworkBrainError):
    """Missing credentials or prompt templates."""


class UpstreamError(NetworkBrainError):
    """Datastore or third-party API failure."""


def register_exception_handlers(app: FastAPI):
    """Install the error envelope handlers on the app."""

    @app.exception_handler(NetworkBrainError)
    async def network_brain_error_handler(request: Request, exc: NetworkBrainError):
        logger.error(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        content = {"error": exc.message}
        if isinstance(exc, ValidationError) and exc.missing_fields:
            content["missing_fields"] = exc.missing_fields
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = [".".join(str(p) for p in e.get("loc", []) if p != "body") for e in errors]
        message = f"Invalid request: {', '.join(f for f in fields if f) or 'malformed body'}"
        logger.warning(f"[API] {request.method} {request.url.path} -> 400: {message}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})
