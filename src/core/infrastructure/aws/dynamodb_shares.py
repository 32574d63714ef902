"""DynamoDB-backed implementation of ShareRepository."""

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from core.models.errors import DynamoDBError
from core.models.share import ShareRecord
from core.repositories.share_repository import ShareRepository
from core.utils.constants import ENV_SHARES_TABLE_NAME, ERROR_CODE_SHARE_STORE_FAILED

logger = Logger(UTC=True)


class DynamoDBShares(ShareRepository):
    """Share records keyed by ``shareToken``."""

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter(ENV_SHARES_TABLE_NAME)

    def put(self, record: ShareRecord) -> bool:
        """Store a record unless the token is already taken."""
        try:
            self._db.put_item(
                item=record.to_item(),
                condition_expression="attribute_not_exists(shareToken)",
            )
            logger.info(
                "Share record stored",
                extra={"image_key": record.image_key, "expires_at": record.expires_at},
            )
            return True

        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False

            logger.error("DynamoDB put_item failed", extra={"image_key": record.image_key})
            raise DynamoDBError(
                message="Unable to store share link",
                error_code=ERROR_CODE_SHARE_STORE_FAILED,
            ) from exc

        except BotoCoreError as exc:
            logger.error("DynamoDB put_item failed", extra={"image_key": record.image_key})
            raise DynamoDBError(
                message="Unable to store share link",
                error_code=ERROR_CODE_SHARE_STORE_FAILED,
            ) from exc

    def get(self, token: str) -> ShareRecord | None:
        try:
            response = self._db.get_item(key={"shareToken": token})

        except (ClientError, BotoCoreError) as exc:
            logger.error("DynamoDB get_item failed for share token")
            raise DynamoDBError(
                message="Unable to read share link",
                error_code=ERROR_CODE_SHARE_STORE_FAILED,
            ) from exc

        item = response.get("Item")
        return ShareRecord.model_validate(item) if item else None

    def exists(self, token: str) -> bool:
        return self.get(token) is not None

    def delete(self, token: str) -> None:
        try:
            self._db.delete_item(key={"shareToken": token})
            logger.info("Share record removed")

        except (ClientError, BotoCoreError) as exc:
            logger.error("DynamoDB delete_item failed for share token")
            raise DynamoDBError(
                message="Unable to delete share link",
                error_code=ERROR_CODE_SHARE_STORE_FAILED,
            ) from exc
