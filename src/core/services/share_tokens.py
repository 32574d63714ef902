"""Time-limited public share links."""

import base64
import secrets
from collections.abc import Callable

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_shares import DynamoDBShares
from core.models.errors import NotFoundError, PermissionDeniedError, ShareTokenGenerationError
from core.models.share import ShareRecord
from core.repositories.share_repository import ShareRepository
from core.utils.constants import (
    DEFAULT_SHARE_EXPIRY_DAYS,
    ERROR_CODE_SHARE_NOT_FOUND,
    MAX_SHARE_EXPIRY_DAYS,
    MS_PER_DAY,
    SHARE_TOKEN_BYTES,
    SHARE_TOKEN_MAX_ATTEMPTS,
)
from core.utils.time import now_ms

logger = Logger(UTC=True)

SHARE_NOT_FOUND_MESSAGE = "Share link not found or expired"


def generate_token() -> str:
    """32 random bytes, base64url without padding (43 characters)."""
    raw = secrets.token_bytes(SHARE_TOKEN_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def clamp_expiry_days(days: int | None) -> int:
    if days is None:
        return DEFAULT_SHARE_EXPIRY_DAYS
    return max(1, min(MAX_SHARE_EXPIRY_DAYS, int(days)))


class ShareTokenService:
    """Creates, resolves and revokes share tokens.

    Uniqueness is enforced by check-then-insert rather than by trusting the
    token entropy alone.
    """

    def __init__(
        self,
        repository: ShareRepository | None = None,
        *,
        clock: Callable[[], int] = now_ms,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self.repository = repository or DynamoDBShares()
        self._clock = clock
        self._token_factory = token_factory

    def create(
        self,
        image_key: str,
        expires_in_days: int | None = DEFAULT_SHARE_EXPIRY_DAYS,
        created_by: str | None = None,
    ) -> ShareRecord:
        """
        Raises:
            ShareTokenGenerationError: If no free token was found in 10 attempts
        """
        days = clamp_expiry_days(expires_in_days)
        created_at = self._clock()

        for attempt in range(1, SHARE_TOKEN_MAX_ATTEMPTS + 1):
            token = self._token_factory()

            if self.repository.exists(token):
                logger.warning("Share token collision", extra={"attempt": attempt})
                continue

            record = ShareRecord(
                share_token=token,
                image_key=image_key,
                created_at=created_at,
                expires_at=created_at + days * MS_PER_DAY,
                created_by=created_by,
            )

            if self.repository.put(record):
                logger.info(
                    "Share link created",
                    extra={"image_key": image_key, "days": days, "created_by": created_by},
                )
                return record

            logger.warning("Share token taken during insert", extra={"attempt": attempt})

        raise ShareTokenGenerationError(
            message="Unable to generate a unique share token",
            details={"attempts": SHARE_TOKEN_MAX_ATTEMPTS},
        )

    def resolve(self, token: str) -> ShareRecord | None:
        """Return the record, or None when absent or expired."""
        if not token:
            return None

        record = self.repository.get(token)
        if record is None or record.is_expired(self._clock()):
            return None

        return record

    def delete(self, token: str, caller_id: str | None) -> None:
        """
        Raises:
            NotFoundError: If the token does not resolve
            PermissionDeniedError: If another user created the share
        """
        record = self.resolve(token)
        if record is None:
            raise NotFoundError(
                message=SHARE_NOT_FOUND_MESSAGE,
                error_code=ERROR_CODE_SHARE_NOT_FOUND,
            )

        if record.created_by and record.created_by != caller_id:
            raise PermissionDeniedError(message="You can only delete your own share links")

        self.repository.delete(token)
        logger.info("Share link deleted", extra={"image_key": record.image_key})
