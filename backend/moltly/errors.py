# backend/moltly/errors.py
"""
Error taxonomy and the handlers that translate it at the HTTP boundary.

- RecordValidationError / malformed bodies -> 400 with field-level details
- HTTPException                            -> its own status (401, 404, ...)
- StorageError / SQLAlchemyError           -> 500, generic message, logged
"""
from dataclasses import asdict, dataclass
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    429: "rate_limit_exceeded",
}


@dataclass
class FieldIssue:
    field: str
    message: str

    def as_dict(self) -> dict:
        return asdict(self)


class RecordValidationError(Exception):
    def __init__(self, issues: list[FieldIssue], message: str = "Validation failed."):
        super().__init__(message)
        self.message = message
        self.issues = issues


class StorageError(Exception):
    """Attachment binary could not be written or read."""


def _error(status_code: int, error: str, message: str, details: list | None = None) -> JSONResponse:
    body = {"error": error, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def record_validation_handler(request: Request, exc: RecordValidationError) -> JSONResponse:
    return _error(400, "validation_error", exc.message, [i.as_dict() for i in exc.issues])


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        # drop the "body"/"query" prefix FastAPI adds
        loc = [str(p) for p in err.get("loc", ())][1:]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return _error(400, "validation_error", "Invalid request.", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "internal_error")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def upstream_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return _error(500, "internal_error", "Something went wrong. Please try again.")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordValidationError, record_validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(StorageError, upstream_error_handler)
    app.add_exception_handler(SQLAlchemyError, upstream_error_handler)
