"""Error taxonomy for the staff record workflow and its HTTP mapping."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StaffRecordError(Exception):
    """Base class for staff record failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StaffRecordError):
    """Caller input was rejected (missing field, bad date, bad image)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StaffRecordError):
    """The referenced staff record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UploadError(StaffRecordError):
    """Object storage rejected the photo upload."""

    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Photo upload failed"


class PersistError(StaffRecordError):
    """The record store rejected a read or write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Failed to save staff record"


class ExportError(StaffRecordError):
    """The spreadsheet could not be generated."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Failed to generate report"


# Client errors carry their own message; server faults get a generic one.
_CLIENT_ERRORS = (ValidationError, NotFoundError)


async def staff_record_error_handler(request: Request, exc: StaffRecordError) -> JSONResponse:
    """Render a StaffRecordError as ``{"error": message}``."""
    if isinstance(exc, _CLIENT_ERRORS):
        message = exc.message
    else:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
        message = exc.public_message
    return JSONResponse(status_code=exc.status_code, content={"error": message})


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render FastAPI request-shape errors in the same envelope."""
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:])
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return JSONResponse(
        status_code=422,
        content={"error": "; ".join(problems) or "Invalid request"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep authentication and routing errors in the ``{"error": ...}`` envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(StaffRecordError, staff_record_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
