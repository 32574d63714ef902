"""
Lambda handler for the unauthenticated health check.
"""

from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.config import validate_config
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)


@api_gateway_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Report liveness plus configuration warnings. Never rate limited."""
    valid, errors = validate_config()

    if not valid:
        logger.warning("Health check with invalid configuration", extra={"errors": errors})

    return ResponseBuilder.ok(
        {
            "status": "ok" if valid else "degraded",
            "timestamp": utc_now_iso(),
            "config": {"valid": valid, "messages": errors},
        }
    )
