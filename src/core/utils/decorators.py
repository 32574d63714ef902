"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError as RequestValidationError

from core.models.errors import (
    AuthError,
    ConfigurationError,
    ImageServiceError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from core.utils.config import is_development
from core.utils.constants import ERROR_CODE_INTERNAL_ERROR
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if level == "exception":
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def _details(exc: ImageServiceError) -> Any:
    """Only development responses carry the underlying details."""
    if not is_development():
        return None
    details = dict(exc.details)
    if exc.__cause__ is not None:
        details.setdefault("cause", str(exc.__cause__))
    return details or None


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Automatic CORS preflight (OPTIONS) handling
    - Mapping of the service error taxonomy to HTTP responses
    - Request ID tracking and structured logging

    Stack traces never reach the client. In development mode the error
    body also carries a ``details`` field.

    Example:
        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({"status": "ok"})
    """

    @wraps(func)
    def wrapper(event: Any, context: Any) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content()

        request_id = getattr(context, "aws_request_id", None)

        try:
            return func(event, context)

        except RequestValidationError as exc:
            _log_error(
                "Request validation failed",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.validation_error(
                message="Invalid request payload",
                details=sanitize_validation_errors(exc.errors()),
            )

        except ValidationError as exc:
            _log_error(
                "Validation error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.bad_request(
                exc.message,
                error=exc.error_code,
                details=_details(exc),
            )

        except AuthError as exc:
            _log_error(
                "Authentication failed",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.unauthorized(exc.message, error=exc.error_code)

        except PermissionDeniedError as exc:
            _log_error(
                "Permission denied in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.forbidden(exc.message, error=exc.error_code)

        except NotFoundError as exc:
            _log_error(
                "Resource not found",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.not_found(exc.message, error=exc.error_code)

        except RateLimitExceededError as exc:
            _log_error(
                "Rate limit exceeded",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.too_many_requests(
                exc.message,
                retry_after=exc.retry_after,
                error=exc.error_code,
            )

        except ConfigurationError as exc:
            _log_error(
                "Service misconfigured",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            if is_development():
                return ResponseBuilder.error(
                    status=HTTPStatus.SERVICE_UNAVAILABLE,
                    message=exc.message,
                    error=exc.error_code,
                    details=_details(exc),
                )
            return ResponseBuilder.internal_error(
                "Internal server error",
                error=ERROR_CODE_INTERNAL_ERROR,
            )

        except ImageServiceError as exc:
            _log_error(
                "Service error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                exc.message,
                error=exc.error_code,
                details=_details(exc),
            )

        # Catch-all for unexpected errors
        except Exception as exc:
            _log_error(
                "Unexpected error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                "Internal server error",
                error=ERROR_CODE_INTERNAL_ERROR,
                details={"cause": str(exc)} if is_development() else None,
            )

    return wrapper


def log_request(log: Logger, message: str, event: dict[str, Any], context: Any) -> None:
    """Emit the request summary every handler starts with."""
    log.info(
        message,
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )
