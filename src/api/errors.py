"""
API error handling - JSON error bodies and FastAPI exception handlers.

Every error leaves the service as ``{"message": ...}``, plus ``detalles``
(field -> messages) for validation failures. Routes translate the domain
errors they have a specific answer for into ApiError; the remaining domain
errors fall through to the handlers registered here. Anything unexpected
is logged and reduced to a generic 500 so stack traces, hashes and
connection strings never reach the caller.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.domain.exceptions import (
    CapacityExceededError,
    ConflictError,
    DomainError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Error de validación"
INTERNAL_MESSAGE = "Error interno del servidor"

# Status for domain errors that reach the handlers untranslated
_DOMAIN_STATUS: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ConflictError: status.HTTP_409_CONFLICT,
    CapacityExceededError: status.HTTP_409_CONFLICT,
    ServiceUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ApiError(Exception):
    """An error with a definite HTTP status and public message."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def error_response(
    status_code: int, message: str, details: dict[str, list[str]] | None = None
) -> JSONResponse:
    body: dict[str, object] = {"message": message}
    if details:
        body["detalles"] = details
    return JSONResponse(status_code=status_code, content=body)


def validation_error(exc: ValidationError, model: type[BaseModel]) -> ApiError:
    """
    Build a 400 ApiError from a domain ValidationError.

    Domain field names are renamed to the request model's wire aliases
    so ``detalles`` uses the names the client sent.
    """
    details: dict[str, list[str]] = {}
    for field_name, messages in exc.errors.items():
        field = model.model_fields.get(field_name)
        wire_name = field.alias if field is not None and field.alias else field_name
        details.setdefault(wire_name, []).extend(messages)
    return ApiError(status.HTTP_400_BAD_REQUEST, VALIDATION_MESSAGE, details)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.details)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render body/path type errors as 400 with per-field details."""
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query")]
        key = loc[-1] if loc else "body"
        details.setdefault(key, []).append(error.get("msg", "Valor inválido"))
    return error_response(status.HTTP_400_BAD_REQUEST, VALIDATION_MESSAGE, details)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = next(
        (code for kind, code in _DOMAIN_STATUS.items() if isinstance(exc, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "Internal error on %s %s: %s", request.method, request.url.path, type(exc).__name__
        )
        return error_response(status_code, INTERNAL_MESSAGE)
    if isinstance(exc, ValidationError):
        return error_response(status_code, VALIDATION_MESSAGE, exc.errors)
    return error_response(status_code, str(exc))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to an application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
