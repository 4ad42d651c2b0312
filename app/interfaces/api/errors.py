"""Translate domain errors into HTTP responses shared by every surface."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.exceptions import (
    FieldError,
    InvalidStatusTransitionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_REQUEST_LOCATIONS = {"body", "query", "path", "header"}


def validation_error_body(exc: ValidationError) -> dict[str, Any]:
    """Return the structured body describing every violated field."""

    return {
        "detail": exc.message,
        "errors": [error.to_dict() for error in exc.errors],
    }


def _field_errors_from_request(exc: RequestValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _REQUEST_LOCATIONS]
        field = ".".join(location) or "body"
        errors.append(FieldError(field, str(error.get("msg", "valor inválido"))))
    return errors


async def _handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=validation_error_body(exc)
    )


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    domain_error = ValidationError(
        _field_errors_from_request(exc), "La solicitud no es válida"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=validation_error_body(domain_error)
    )


async def _handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _handle_invalid_transition(
    request: Request, exc: InvalidStatusTransitionError
) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


async def _handle_store_unavailable(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handlers on ``app``."""

    app.add_exception_handler(ValidationError, _handle_validation_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(NotFoundError, _handle_not_found)
    app.add_exception_handler(InvalidStatusTransitionError, _handle_invalid_transition)
    app.add_exception_handler(StoreUnavailableError, _handle_store_unavailable)


__all__ = ["register_exception_handlers", "validation_error_body"]
