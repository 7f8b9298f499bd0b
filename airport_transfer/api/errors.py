"""Maps domain errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from airport_transfer.domain.errors import AuthenticationRequired, BookingServiceError


async def booking_service_error_handler(
    request: Request, exc: BookingServiceError
) -> JSONResponse:
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if isinstance(exc, AuthenticationRequired)
        else None
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.error},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingServiceError, booking_service_error_handler)
