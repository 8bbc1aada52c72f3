"""
Error taxonomy and FastAPI handlers.

Every error leaves the API as ``{"error": <message>}``. Domain errors are
terminal for the request and never retried.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FilesManagerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(FilesManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthError(FilesManagerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class NotFoundError(FilesManagerError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_files_manager_error(request: Request, exc: FilesManagerError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, ValidationError.message)


async def handle_broad_exceptions(request: Request, call_next):
    """Turn unexpected failures (e.g. a store outage) into a 500 response."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, FilesManagerError.message
        )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FilesManagerError, handle_files_manager_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.middleware("http")(handle_broad_exceptions)
