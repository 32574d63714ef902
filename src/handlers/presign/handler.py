"""
Lambda handler issuing presigned URLs: ``POST /api/presign``.

Uploads go straight from the client to S3 through a presigned PUT. The
resulting ObjectCreated event drives derivative generation and indexing.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.utils.auth import require_auth
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler, log_request
from core.utils.keys import validate_key
from core.utils.rate_limit import rate_limited
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, validate_request

from .models import PresignRequest, PresignResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@rate_limited
@require_auth
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    log_request(logger, "Received presign request", event, context)

    request = validate_request(PresignRequest, parse_json_body(event))
    validate_key(request.key)

    expires_in = request.capped_expiry()
    url = S3ImageStorage().generate_presigned_url(
        operation=request.operation,
        key=request.key,
        expires_in=expires_in,
        content_type=request.content_type,
    )

    logger.info(
        "Presigned URL issued",
        extra={"operation": request.operation, "key": request.key, "expires_in": expires_in},
    )

    return ResponseBuilder.ok(
        PresignResponse(url=url, expires_in=expires_in).model_dump(by_alias=True)
    )
