"""
Domain error taxonomy.

Every error carries a stable machine-readable ``code`` and the HTTP status the
API layer answers with. Services raise these; ``register_error_handlers``
renders them as the ``{"error": {...}}`` envelope.
"""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import pydantic
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class MarketplaceError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "status": self.status_code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(MarketplaceError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(MarketplaceError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(MarketplaceError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Not allowed"


class NotFound(MarketplaceError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class InvalidState(MarketplaceError):
    code = "INVALID_STATE"
    status_code = 409
    default_message = "Resource is not in the required state"


class AlreadyAssigned(InvalidState):
    code = "ALREADY_ASSIGNED"
    default_message = "This gig has already been assigned"


class LostRace(AlreadyAssigned):
    """A concurrent hire committed between our read and our conditional write."""


class Conflict(MarketplaceError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists"


class InternalError(MarketplaceError):
    pass


# raised by the store or its driver when it fails or stalls
STORAGE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


def parse_input(model: type[ModelT], **data: Any) -> ModelT:
    """Validate raw field values against a schema, raising ``ValidationError``."""
    try:
        return model(**data)
    except pydantic.ValidationError as exc:
        raise ValidationError(_summarize(exc.errors()), details=_field_errors(exc.errors())) from exc


def _field_errors(errors: list[dict]) -> list[dict[str, str]]:
    return [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in errors
    ]


def _summarize(errors: list[dict]) -> str:
    return ", ".join(f"{e['field']}: {e['message']}" for e in _field_errors(errors))


# ---------------------------------------------------------------------------
# FastAPI integration
# ---------------------------------------------------------------------------


async def _marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request.failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = list(exc.errors())
    err = ValidationError(_summarize(errors), details=_field_errors(errors))
    return JSONResponse(status_code=err.status_code, content={"error": err.to_dict()})


_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing-level errors (unknown route, wrong method) in the same envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
                "message": message,
                "status": exc.status_code,
            }
        },
        headers=getattr(exc, "headers", None),
    )


async def _storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Store faults outside the hire transaction (timeouts, lost connections)."""
    log.error("request.storage_failed", path=request.url.path, error=str(exc), exc_info=exc)
    err = InternalError()
    return JSONResponse(status_code=err.status_code, content={"error": err.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, _marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    for exc_class in STORAGE_ERRORS:
        app.add_exception_handler(exc_class, _storage_error_handler)
