"""Translate exceptions into the response envelope.

Handlers are installed once by ``register_exception_handlers``; route code
raises ``AppError`` subclasses and never builds error responses itself.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from productivity.core.config import Settings
from productivity.core.errors import AppError, ErrorKind, UnauthorizedError
from productivity.core.logging import get_logger
from productivity.schemas.common import ErrorResponse

logger = get_logger("errors")


def _error_response(
    status_code: int,
    message: str,
    errors: list[str] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Install the envelope-producing exception handlers on ``app``."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.info
        log_fn(
            f"{exc.kind.value}: {exc.message}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            },
        )
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return _error_response(exc.status_code, exc.message, exc.errors, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [_format_validation_error(error) for error in exc.errors()]
        logger.info(
            f"{ErrorKind.VALIDATION.value}: {'; '.join(errors)}",
            extra={"path": request.url.path, "method": request.method, "status_code": 400},
        )
        return _error_response(400, "Validation error", errors)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        # Unique races that slipped past the service-level checks
        logger.warning(
            f"Integrity error on {request.method} {request.url.path}: {exc.orig}",
            extra={"path": request.url.path, "method": request.method, "status_code": 409},
        )
        return _error_response(409, "Resource already exists")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_response(exc.status_code, message, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            exc_info=exc,
            extra={"path": request.url.path, "method": request.method, "status_code": 500},
        )
        message = str(exc) if app_settings.debug else "Internal server error"
        return _error_response(500, message)
