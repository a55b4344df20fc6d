from __future__ import annotations
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.services.errors import (
    InvalidPayloadError,
    InvalidTransitionError,
    RecomputeError,
    SnapshotNotFoundError,
    TaskNotFoundError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[RecomputeError], int] = {
    TaskNotFoundError: 404,
    SnapshotNotFoundError: 404,
    InvalidTransitionError: 409,
    InvalidPayloadError: 422,
}


async def recompute_error_handler(request: Request, exc: RecomputeError) -> JSONResponse:
    status_code = next((code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error(f"unhandled service error in {request.url.path}: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})
