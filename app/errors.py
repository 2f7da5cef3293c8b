"""Error taxonomy and structured error handlers with request_id correlation.

Framework errors (``HTTPException``, validation, unhandled) keep a
consistent envelope:
    {
        "code": "error_code",
        "message": "Human-readable message",
        "details": null | object,
        "request_id": "uuid"
    }

Domain errors raised by the billing core (``AppError`` subclasses) are
answered with the short body the checkout UI and the payment gateway
expect:
    {"error": "Human-readable message", "code": "error_code", "request_id": "uuid"}

Unhandled exceptions carry both shapes, with ``error`` set to
"Internal Server Error".
"""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status at the API boundary."""

    status_code = 500
    code = "app_error"
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AppError):
    code = "configuration_error"
    default_message = "Service is not configured"


class Unauthorized(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Not authenticated"


class ProfileNotFound(AppError):
    status_code = 404
    code = "profile_not_found"
    default_message = "Subscriber profile not found"


class MissingRequiredField(AppError):
    status_code = 400
    code = "missing_required_field"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(
            message or f"Missing required field '{field}'. Update your profile and try again."
        )


class GatewayError(AppError):
    status_code = 502
    code = "gateway_error"
    default_message = "Asaas request failed"


class WebhookMalformed(AppError):
    status_code = 400
    code = "webhook_malformed"
    default_message = "Malformed webhook payload"


class WebhookNotConfigured(AppError):
    status_code = 503
    code = "webhook_not_configured"
    default_message = "Webhook not configured"


class ReconciliationFailure(AppError):
    code = "reconciliation_failure"
    default_message = "Internal Server Error"


def _get_request_id(request: Request) -> str:
    """Extract request_id set by ObservabilityMiddleware."""
    return getattr(request.state, "request_id", "unknown")


def _error_payload(
    code: str, message: str, details: object, request_id: str
) -> dict:
    return {
        "code": code,
        "message": message,
        "details": details,
        "request_id": request_id,
    }


def register_error_handlers(app: object) -> None:
    @app.exception_handler(AppError)  # type: ignore[arg-type]
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        request_id = _get_request_id(request)
        extra = {"request_id": request_id, "status": exc.status_code}
        if exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc,
                extra=extra,
            )
        else:
            logger.warning(
                "%s on %s %s: %s",
                type(exc).__name__,
                request.method,
                request.url.path,
                exc.message,
                extra=extra,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "code": exc.code, "request_id": request_id},
        )

    @app.exception_handler(HTTPException)  # type: ignore[arg-type]
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        request_id = _get_request_id(request)
        detail = exc.detail
        code = f"http_{exc.status_code}"
        message = "Request failed"
        details = None
        if isinstance(detail, dict):
            code = detail.get("code", code)
            message = detail.get("message", message)
            details = detail.get("details")
        elif isinstance(detail, str):
            message = detail
        else:
            details = detail
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(code, message, details, request_id),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)  # type: ignore[arg-type]
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        request_id = _get_request_id(request)
        # ctx may hold the raw exception raised by a validator
        errors = [
            {key: value for key, value in error.items() if key != "ctx"}
            for error in exc.errors()
        ]
        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            errors,
            extra={"request_id": request_id},
        )
        return JSONResponse(
            status_code=422,
            content=_error_payload(
                "validation_error",
                "Validation error",
                jsonable_encoder(errors),
                request_id,
            ),
        )

    @app.exception_handler(Exception)  # type: ignore[arg-type]
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        request_id = _get_request_id(request)
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
            extra={"request_id": request_id},
        )
        payload = _error_payload("internal_error", "Internal server error", None, request_id)
        # The checkout UI and the payment gateway read ``error`` on every failure
        payload["error"] = "Internal Server Error"
        return JSONResponse(status_code=500, content=payload)
