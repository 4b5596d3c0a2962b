"""Global exception handlers rendering every failure as an ErrorResponse."""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import HTTP_500_INTERNAL_SERVER_ERROR
from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_dict, sanitize_error_context
from src.core.exceptions import (
    ErrorCode,
    NotFoundError,
    PayvaultError,
    PersistenceError,
    Severity,
    UnauthorizedError,
    ValidationError,
)

# Checked in order; the first matching class wins
STATUS_BY_ERROR: tuple[tuple[type[PayvaultError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def get_service_info(settings: Settings) -> ServiceInfo:
    """Service metadata attached to every error response."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: PayvaultError) -> int:
    """HTTP status for an application error, 500 when unmapped."""
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def payvault_error_handler(request: Request, exc: Exception) -> Response:
    """Render a PayvaultError with its code, severity and sanitized context.

    Raises:
        TypeError: If exc is not a PayvaultError instance
    """
    if not isinstance(exc, PayvaultError):
        raise TypeError(f"Expected PayvaultError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()
    status_code = status_code_for(exc)

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "status_code": status_code,
        },
    )
    log = logger.error if exc.should_alert else logger.warning
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        correlation_id=correlation_id,
        **error_context,
    )

    debug_info = None
    if settings.environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "exception_type": type(exc).__name__,
            "fingerprint": exc.fingerprint,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    error_response = ErrorResponse(
        error_code=exc.error_code,
        message=exc.message,
        details=sanitize_dict(exc.context) if exc.context else None,
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=exc.severity.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Render request body and parameter validation failures field by field.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # ['body', 'amount'] -> 'amount'
        location = error.get("loc", ())
        field_name = ".".join(str(part) for part in location[1:]) or "root"
        field_errors.setdefault(field_name, []).append(error.get("msg", "Invalid value"))

    logger.warning(
        "Request validation failed",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
        validation_errors=field_errors,
    )

    error_response = ErrorResponse(
        error_code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        details={"validation_errors": field_errors},
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=Severity.LOW.value,
        service_info=get_service_info(settings),
    )
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Render Starlette HTTP exceptions (404 routes, 405 methods, bearer 403).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_code, severity = ErrorCode.INTERNAL_ERROR, Severity.MEDIUM
    if exc.status_code == status.HTTP_400_BAD_REQUEST:
        error_code, severity = ErrorCode.VALIDATION_ERROR, Severity.LOW
    elif exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        error_code, severity = ErrorCode.UNAUTHORIZED, Severity.HIGH
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code, severity = ErrorCode.NOT_FOUND, Severity.LOW
    elif exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        severity = Severity.HIGH

    logger.warning(
        "HTTP exception",
        correlation_id=correlation_id,
        status=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
    )

    error_response = ErrorResponse(
        error_code=error_code.value,
        message=str(exc.detail),
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=severity.value,
        service_info=get_service_info(settings),
    )
    return ORJSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Render anything unhandled as a 500, hiding details in production."""
    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_context = sanitize_error_context(
        exc,
        {"request_method": request.method, "request_path": str(request.url.path)},
    )
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=correlation_id,
        **error_context,
    )

    if settings.environment == "production":
        message = "An internal server error occurred"
        details = None
        debug_info = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}
        debug_info = {
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "exception_type": type(exc).__name__,
        }

    error_response = ErrorResponse(
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
        request_id=generate_request_id(),
        severity=Severity.CRITICAL.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on the application, most specific first."""
    app.add_exception_handler(PayvaultError, payvault_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
