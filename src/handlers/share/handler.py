"""
Lambda handlers for share links.

- ``POST /api/share/create``: ``create_handler``
- ``GET /api/share/{token}``: ``resolve_handler`` (public, rate limited)
- ``DELETE /api/share/{token}``: ``delete_handler``
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.auth import get_user_id, require_auth
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, log_request
from core.utils.keys import validate_key
from core.utils.rate_limit import rate_limited
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, path_params, validate_request

from .models import CreateShareRequest, ShareTokenPath
from .service import ShareService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def create_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Create a time-limited public link to one image."""
    log_request(logger, "Received create share request", event, context)

    request = validate_request(CreateShareRequest, parse_json_body(event))
    validate_key(request.image_key)

    result = ShareService().create_share(
        request.image_key,
        expires_in_days=request.expires_in_days,
        created_by=get_user_id(event),
    )

    return ResponseBuilder.ok(result)


@api_gateway_handler
@rate_limited
@tracer.capture_lambda_handler
@metrics.log_metrics()
def resolve_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received resolve share request", event, context)

    request = validate_request(ShareTokenPath, path_params(event))
    result = ShareService().resolve_share(request.token)

    return ResponseBuilder.ok(result)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def delete_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Revoke a share link. Only its creator may revoke a link that has one."""
    log_request(logger, "Received delete share request", event, context)

    request = validate_request(ShareTokenPath, path_params(event))
    ShareService().delete_share(request.token, caller_id=get_user_id(event))

    return ResponseBuilder.ok({"success": True})
