"""
Lambda handler for S3 ObjectCreated notifications.

Each created original gets a thumbnail and a preview, and its metadata
index record is refreshed. Deliveries are at-least-once; generation is
idempotent, so redelivered events only produce "already exists" outcomes.
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote_plus

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.data_classes import S3Event, event_source
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.derivatives.generator import SKIP_EXISTS, DerivativeGenerator, DerivativeResult
from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.services.indexing import refresh_index_record
from core.utils.concurrency import run_bounded
from core.utils.constants import METRICS_NAMESPACE
from core.utils.keys import is_derivative_key, is_image_key

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@dataclass
class _Outcome:
    key: str
    results: list[DerivativeResult] = field(default_factory=list)

    @property
    def generated(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failures(self) -> int:
        return sum(1 for result in self.results if not result.success and not result.skipped)


def _log_result(key: str, result: DerivativeResult) -> None:
    extra = {"key": key, "kind": result.kind.value, "derivative_key": result.derivative_key}

    if result.success:
        logger.info("Derivative created", extra=extra)
    elif result.error == SKIP_EXISTS:
        logger.info("Derivative already exists", extra=extra)
    elif result.skipped:
        logger.info("Derivative skipped", extra={**extra, "reason": result.error})
    else:
        logger.error("Derivative generation failed", extra={**extra, "error": result.error})


class _Processor:
    """Per-invocation state: one storage client per bucket, one index."""

    def __init__(self) -> None:
        self._storages: dict[str, S3ImageStorage] = {}
        self._index: DynamoDBMetadata | None = None

    def storage(self, bucket: str) -> S3ImageStorage:
        if bucket not in self._storages:
            self._storages[bucket] = S3ImageStorage(S3Adapter(bucket_name=bucket))
        return self._storages[bucket]

    def index(self) -> DynamoDBMetadata:
        if self._index is None:
            self._index = DynamoDBMetadata()
        return self._index

    def process(self, bucket: str, key: str) -> _Outcome:
        storage = self.storage(bucket)
        results = DerivativeGenerator(storage).generate_all(key)

        outcome = _Outcome(key=key, results=list(results.values()))
        for result in outcome.results:
            _log_result(key, result)

        if is_image_key(key) and not is_derivative_key(key):
            try:
                refresh_index_record(storage, self.index(), key)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Index unavailable", extra={"key": key, "error": str(exc)})

        return outcome


@tracer.capture_lambda_handler
@metrics.log_metrics()
@event_source(data_class=S3Event)
def handler(event: S3Event, context: LambdaContext) -> dict[str, Any]:
    """
    Generate derivatives for every record in the notification.

    Never raises: per-record failures are logged and counted so the
    notification is not redelivered for errors a retry would not fix.

    Returns:
        ``{"processed": n, "succeeded": s, "failed": f}``
    """
    # Notification keys are URL-encoded with "+" for spaces
    targets = [
        (record.s3.bucket.name, unquote_plus(record.s3.get_object.key))
        for record in event.records
    ]

    logger.info(
        "Received S3 event",
        extra={
            "records": len(targets),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    processor = _Processor()
    outcomes = run_bounded(lambda target: processor.process(*target), targets)

    succeeded = failed = generated = failures = 0
    for (bucket, key), outcome in zip(targets, outcomes):
        if isinstance(outcome, Exception):
            logger.error(
                "Record processing failed",
                extra={"bucket": bucket, "key": key, "error": str(outcome)},
            )
            failed += 1
            continue

        generated += outcome.generated
        failures += outcome.failures
        if outcome.failures:
            failed += 1
        else:
            succeeded += 1

    metrics.add_metric(name="DerivativesGenerated", unit=MetricUnit.Count, value=generated)
    metrics.add_metric(name="DerivativeFailures", unit=MetricUnit.Count, value=failures)

    summary = {"processed": len(targets), "succeeded": succeeded, "failed": failed}
    logger.info("S3 event processed", extra=summary)

    return summary
