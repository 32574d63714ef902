"""Custom exception classes for the photo album service.

Upstream SDK failures are mapped into this closed set once, in the
infrastructure layer. Handlers only ever see these types.
"""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_AUTH_NOT_CONFIGURED,
    ERROR_CODE_DYNAMODB,
    ERROR_CODE_FORBIDDEN,
    ERROR_CODE_INVALID_KEY,
    ERROR_CODE_RATE_LIMITED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_S3,
    ERROR_CODE_SHARE_TOKEN_GENERATION_FAILED,
    ERROR_CODE_TOKEN_EXPIRED,
    ERROR_CODE_TOKEN_INVALID,
    ERROR_CODE_TOKEN_MALFORMED,
    ERROR_CODE_VALIDATION_FAILED,
)


class ImageServiceError(Exception):
    """
    Base exception for all photo album service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class ValidationError(ImageServiceError):
    """Raised when request validation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class InvalidKeyError(ValidationError):
    """Raised when an object key or prefix is unsafe."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_INVALID_KEY,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NotFoundError(ImageServiceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_RESOURCE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class PermissionDeniedError(ImageServiceError):
    """Raised when the caller may not act on a resource."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_FORBIDDEN,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class RateLimitExceededError(ImageServiceError):
    """Raised when a client exceeds the request window."""

    retry_after: int

    def __init__(
        self,
        *,
        message: str = "Too many requests, please try again later.",
        retry_after: int = 0,
        error_code: str = ERROR_CODE_RATE_LIMITED,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ConfigurationError(ImageServiceError):
    """Raised when a required collaborator is not configured."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_AUTH_NOT_CONFIGURED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UpstreamError(ImageServiceError):
    """Raised when a managed AWS service call fails."""


class S3Error(UpstreamError):
    """Raised when an object storage operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_S3,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class DynamoDBError(UpstreamError):
    """Raised when a DynamoDB operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_DYNAMODB,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ShareTokenGenerationError(ImageServiceError):
    """Raised when no unused share token could be generated."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_SHARE_TOKEN_GENERATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class AuthError(ImageServiceError):
    """Base class for bearer token failures. Always a 401."""

    def __init__(
        self,
        *,
        message: str = "Unauthorized: Invalid token",
        error_code: str = ERROR_CODE_TOKEN_INVALID,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class TokenExpiredError(AuthError):
    """Raised when the bearer token is past its expiry."""

    def __init__(
        self,
        *,
        message: str = "Token expired. Please login again.",
        error_code: str = ERROR_CODE_TOKEN_EXPIRED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class MalformedTokenError(AuthError):
    """Raised when the bearer token cannot be decoded at all."""

    def __init__(
        self,
        *,
        message: str = "Invalid token format.",
        error_code: str = ERROR_CODE_TOKEN_MALFORMED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class InvalidTokenError(AuthError):
    """Raised for any other verification failure."""
