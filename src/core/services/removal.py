"""Removal of derivative objects alongside their originals."""

from aws_lambda_powertools import Logger

from core.repositories.storage_repository import ImageStorageRepository
from core.utils.keys import preview_key, thumbnail_key

logger = Logger(UTC=True)


def derivative_keys(key: str) -> list[str]:
    return [thumbnail_key(key), preview_key(key)]


def remove_derivatives(storage: ImageStorageRepository, key: str) -> list[str]:
    """Delete each derivative of ``key`` that exists.

    Failures are logged and skipped. Returns the derivative keys removed.
    """
    removed: list[str] = []

    for derivative in derivative_keys(key):
        try:
            if not storage.exists(key=derivative):
                continue
            storage.remove_image(key=derivative)
            removed.append(derivative)
            logger.info("Deleted derivative", extra={"key": derivative})

        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Error deleting derivative",
                extra={"key": derivative, "error": str(exc), "error_type": type(exc).__name__},
            )

    return removed
