"""Startup configuration checks."""

import os

from aws_lambda_powertools import Logger

from core.utils.constants import (
    DEVELOPMENT_ENVIRONMENT,
    ENV_AWS_REGION,
    ENV_COGNITO_CLIENT_ID,
    ENV_COGNITO_USER_POOL_ID,
    ENV_ENVIRONMENT,
    ENV_IMAGE_METADATA_TABLE_NAME,
    ENV_IMAGE_S3_BUCKET_NAME,
    ENV_RATE_LIMIT_TABLE_NAME,
    ENV_SHARES_TABLE_NAME,
)

logger = Logger(UTC=True)

REQUIRED_VARIABLES = (
    ENV_IMAGE_S3_BUCKET_NAME,
    ENV_IMAGE_METADATA_TABLE_NAME,
)

OPTIONAL_VARIABLES = (
    ENV_SHARES_TABLE_NAME,
    ENV_RATE_LIMIT_TABLE_NAME,
    ENV_COGNITO_USER_POOL_ID,
    ENV_COGNITO_CLIENT_ID,
)


def _configured(name: str) -> bool:
    value = os.getenv(name, "").strip()
    return bool(value) and not value.startswith("dummy_")


def is_development() -> bool:
    return os.getenv(ENV_ENVIRONMENT, "").lower() == DEVELOPMENT_ENVIRONMENT


def validate_config() -> tuple[bool, list[str]]:
    """Check the environment the service needs.

    Returns:
        ``(valid, errors)``. Missing required variables make the config
        invalid. Missing optional ones are reported with a ``Warning:``
        prefix and do not affect validity. Placeholder values starting
        with ``dummy_`` count as missing.
    """
    errors: list[str] = []

    for name in REQUIRED_VARIABLES:
        if not _configured(name):
            errors.append(f"{name} is required")

    if not os.getenv(ENV_AWS_REGION):
        errors.append(f"Warning: {ENV_AWS_REGION} is not set, boto3 defaults apply")

    for name in OPTIONAL_VARIABLES:
        if not _configured(name):
            errors.append(f"Warning: {name} is not configured")

    if not (_configured(ENV_COGNITO_USER_POOL_ID) and _configured(ENV_COGNITO_CLIENT_ID)):
        errors.append("Warning: authentication is not configured, protected routes will fail")

    valid = not any(not message.startswith("Warning:") for message in errors)

    if not valid:
        logger.error("Configuration invalid", extra={"errors": errors})
    elif errors:
        logger.warning("Configuration incomplete", extra={"warnings": errors})

    return valid, errors
