"""Translate tracker errors into JSON error responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from grocery_tracker.domain.errors import (
    AuthenticationError,
    DuplicateNameError,
    GatewayError,
    GroceryTrackerError,
    MigrationAlreadyCompletedError,
    NotFoundError,
)
from grocery_tracker.logging_config import get_logger

logger = get_logger(__name__)


def _status_for(exc: GroceryTrackerError) -> int:
    if isinstance(exc, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (DuplicateNameError, MigrationAlreadyCompletedError)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, GatewayError):
        return status.HTTP_502_BAD_GATEWAY
    # ValidationError, ReservedCategoryError, SchemaError
    return status.HTTP_400_BAD_REQUEST


async def tracker_error_handler(request: Request, exc: GroceryTrackerError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GroceryTrackerError, tracker_error_handler)
