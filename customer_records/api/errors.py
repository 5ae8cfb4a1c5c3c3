"""Unified error handling — ServiceError + RequestValidationError → JSON."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from customer_records.services import (
    AuthenticationError,
    ConflictError,
    CustomerValidationError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    ServiceError,
    ValidationError,
)

_STATUS_MAP: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    ValidationError: 400,
    InvalidInputError: 400,
    PersistenceError: 400,
    AuthenticationError: 401,
    ForbiddenError: 403,
}


def service_error_response(exc: ServiceError) -> JSONResponse:
    """Render a service error as its JSON error response."""
    status = 500
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            status = _STATUS_MAP[cls]
            break

    content: dict = {"detail": str(exc)}
    if isinstance(exc, CustomerValidationError):
        content["errors"] = exc.errors

    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=content, headers=headers)


async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    return service_error_response(exc)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies in the same shape as rule violations."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err["loc"] if part != "body"]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(err["msg"])
    return JSONResponse(
        status_code=400,
        content={"detail": "validation failed", "errors": errors},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
