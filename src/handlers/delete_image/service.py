"""Business logic for image deletion.

The original is removed first, then each derivative that exists, then the
index record. Only the first step can fail the request.
"""

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.services.indexing import remove_index_record
from core.services.removal import remove_derivatives

logger = Logger(UTC=True)


class DeleteService:
    """Application service responsible for deleting images."""

    def __init__(self) -> None:
        self.storage = S3ImageStorage()
        self.metadata = DynamoDBMetadata()

    def delete_image(self, key: str) -> None:
        """Delete an image, its derivatives and its index record.

        Deleting a missing key succeeds, as S3 deletes do.

        Raises:
            S3Error: If the original could not be deleted
        """
        logger.debug("Starting image deletion", extra={"key": key})

        self.storage.remove_image(key=key)
        removed = remove_derivatives(self.storage, key)
        remove_index_record(self.metadata, key)

        logger.info(
            "Image deleted successfully",
            extra={"key": key, "derivatives_removed": len(removed)},
        )
