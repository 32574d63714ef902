"""Bearer token authentication for API Gateway handlers."""

from __future__ import annotations

import os
from collections.abc import Callable
from functools import wraps
from typing import Any, Protocol

from aws_lambda_powertools import Logger

from core.infrastructure.aws.cognito_verifier import CognitoTokenVerifier
from core.models.errors import AuthError, ConfigurationError
from core.utils.constants import (
    DEFAULT_AWS_REGION,
    ENV_AWS_REGION,
    ENV_COGNITO_CLIENT_ID,
    ENV_COGNITO_USER_POOL_ID,
    ERROR_CODE_UNAUTHORIZED,
)

logger = Logger(UTC=True)

JsonDict = dict[str, Any]


class TokenVerifier(Protocol):
    def verify(self, token: str) -> dict[str, Any]: ...


_verifier: TokenVerifier | None = None


def _configured(value: str | None) -> bool:
    return bool(value) and not value.startswith("dummy_")


def get_verifier() -> TokenVerifier:
    """Return the process-wide verifier, building it on first use.

    Raises:
        ConfigurationError: If the user pool or client id is not configured.
    """
    global _verifier

    if _verifier is None:
        user_pool_id = os.getenv(ENV_COGNITO_USER_POOL_ID)
        client_id = os.getenv(ENV_COGNITO_CLIENT_ID)

        if not (_configured(user_pool_id) and _configured(client_id)):
            raise ConfigurationError(message="Authentication not configured")

        _verifier = CognitoTokenVerifier(
            user_pool_id=user_pool_id,
            client_id=client_id,
            region=os.getenv(ENV_AWS_REGION, DEFAULT_AWS_REGION),
        )

    return _verifier


def set_verifier(verifier: TokenVerifier | None) -> None:
    """Replace the process-wide verifier. ``None`` resets it."""
    global _verifier
    _verifier = verifier


def extract_bearer_token(event: dict[str, Any]) -> str | None:
    headers = event.get("headers") or {}
    value = next(
        (v for k, v in headers.items() if k.lower() == "authorization"),
        None,
    )
    if not value or not value.startswith("Bearer "):
        return None
    token = value[len("Bearer ") :].strip()
    return token or None


def get_user_id(event: dict[str, Any]) -> str | None:
    """Cognito ``sub`` of the authenticated caller, if any."""
    claims = ((event.get("requestContext") or {}).get("authorizer") or {}).get("claims") or {}
    return claims.get("sub")


def require_auth(func: Callable[..., JsonDict]) -> Callable[..., JsonDict]:
    """Reject requests without a valid bearer token.

    Verified claims are attached at ``requestContext.authorizer.claims``.
    """

    @wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> JsonDict:
        token = extract_bearer_token(event)
        if token is None:
            raise AuthError(
                message="Unauthorized: Missing or invalid token",
                error_code=ERROR_CODE_UNAUTHORIZED,
            )

        claims = get_verifier().verify(token)

        request_context = event.setdefault("requestContext", {})
        authorizer = request_context.setdefault("authorizer", {})
        authorizer["claims"] = claims

        logger.debug("Request authenticated", extra={"sub": claims.get("sub")})

        return func(event, context)

    return wrapper
