"""Idempotent thumbnail and preview generation.

A derivative that already exists is never regenerated, so redelivered
S3 events are harmless. Failures are reported in the result, not raised.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

from aws_lambda_powertools import Logger

from core.derivatives.imaging import make_preview, make_thumbnail
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    DERIVATIVE_CACHE_CONTROL,
    DERIVATIVE_CONTENT_TYPE,
    PREVIEW_MAX_HEIGHT,
    PREVIEW_MAX_WIDTH,
    THUMBNAIL_SIZE,
)
from core.utils.keys import is_derivative_key, is_image_key, preview_key, thumbnail_key

logger = Logger(UTC=True)

SKIP_GENERATED = "Skipping generated image file"
SKIP_NOT_IMAGE = "Not an image file"
SKIP_EXISTS = "already exists"


class DerivativeKind(str, Enum):
    THUMBNAIL = "thumbnail"
    PREVIEW = "preview"


@dataclass(frozen=True)
class DerivativeResult:
    """Outcome of one generation attempt.

    ``skipped`` marks the expected no-op cases (derivative input, non-image,
    already present). ``success`` is only true when a new object was written.
    """

    kind: DerivativeKind
    success: bool
    derivative_key: str | None = None
    error: str | None = None
    skipped: bool = False


@dataclass(frozen=True)
class _KindProfile:
    key_for: Callable[[str], str]
    transform: Callable[[bytes], bytes]
    size_annotation: str
    metadata_name: str


_PROFILES: dict[DerivativeKind, _KindProfile] = {
    DerivativeKind.THUMBNAIL: _KindProfile(
        key_for=thumbnail_key,
        transform=make_thumbnail,
        size_annotation=f"{THUMBNAIL_SIZE}x{THUMBNAIL_SIZE}",
        metadata_name="thumbnail-size",
    ),
    DerivativeKind.PREVIEW: _KindProfile(
        key_for=preview_key,
        transform=make_preview,
        size_annotation=f"{PREVIEW_MAX_WIDTH}x{PREVIEW_MAX_HEIGHT}",
        metadata_name="preview-max-size",
    ),
}


class DerivativeGenerator:
    """Produces derivative objects for originals in one bucket."""

    def __init__(self, storage: ImageStorageRepository | None = None) -> None:
        self.storage = storage or S3ImageStorage()

    def generate(self, kind: DerivativeKind, original_key: str) -> DerivativeResult:
        profile = _PROFILES[kind]

        if is_derivative_key(original_key):
            return DerivativeResult(kind=kind, success=False, error=SKIP_GENERATED, skipped=True)

        if not is_image_key(original_key):
            return DerivativeResult(kind=kind, success=False, error=SKIP_NOT_IMAGE, skipped=True)

        derivative_key = profile.key_for(original_key)

        try:
            # Step 1: never regenerate an existing derivative
            if self.storage.exists(key=derivative_key):
                return DerivativeResult(
                    kind=kind,
                    success=False,
                    derivative_key=derivative_key,
                    error=SKIP_EXISTS,
                    skipped=True,
                )

            # Step 2: download and transform
            original = self.storage.download_image(key=original_key)
            body = profile.transform(original)

            # Step 3: upload with long-lived caching
            self.storage.upload_image(
                key=derivative_key,
                body=body,
                content_type=DERIVATIVE_CONTENT_TYPE,
                metadata={
                    "original-key": original_key,
                    profile.metadata_name: profile.size_annotation,
                },
                cache_control=DERIVATIVE_CACHE_CONTROL,
            )

        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Derivative generation failed",
                extra={
                    "kind": kind.value,
                    "key": original_key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return DerivativeResult(
                kind=kind,
                success=False,
                derivative_key=derivative_key,
                error=str(exc) or type(exc).__name__,
            )

        logger.info(
            "Derivative created",
            extra={"kind": kind.value, "key": original_key, "derivative_key": derivative_key},
        )
        return DerivativeResult(kind=kind, success=True, derivative_key=derivative_key)

    def generate_all(self, original_key: str) -> dict[DerivativeKind, DerivativeResult]:
        """Generate every kind concurrently. One failing does not affect the other."""
        kinds = list(DerivativeKind)

        with ThreadPoolExecutor(max_workers=len(kinds)) as executor:
            results = executor.map(lambda kind: self.generate(kind, original_key), kinds)
            return dict(zip(kinds, results))
