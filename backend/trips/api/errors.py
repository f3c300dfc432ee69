"""Map domain errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.trips.errors import ConflictError, InvalidInputError, NotFoundError, TripEngineError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[TripEngineError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
}


async def trip_engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain error as {"detail": message} with the mapped status."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_cls, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_cls):
            status_code = code
            break

    message = exc.message if isinstance(exc, TripEngineError) else str(exc)
    logger.info(
        f"{request.method} {request.url.path} -> {status_code}",
        extra={"structured": {"error_type": type(exc).__name__, "detail": message}},
    )
    return JSONResponse(status_code=status_code, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TripEngineError, trip_engine_error_handler)
