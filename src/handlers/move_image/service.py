"""Business logic for moving an image to a new key."""

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import ValidationError
from core.services.indexing import refresh_index_record, remove_index_record
from core.services.removal import remove_derivatives

logger = Logger(UTC=True)


class MoveService:
    def __init__(self) -> None:
        self.storage = S3ImageStorage()
        self.metadata = DynamoDBMetadata()

    def move_image(self, old_key: str, new_key: str) -> None:
        """Copy ``old_key`` to ``new_key`` and remove the old object.

        Derivatives of the old key are deleted; the copy's creation event
        produces new ones. The index record follows the object.

        Raises:
            ValidationError: If both keys are the same
            NotFoundError: If ``old_key`` does not exist
            S3Error: If the copy or the delete fails
        """
        if old_key == new_key:
            raise ValidationError(
                message="oldKey and newKey must differ",
                details={"key": old_key},
            )

        self.storage.copy_image(source_key=old_key, dest_key=new_key)
        self.storage.remove_image(key=old_key)

        remove_derivatives(self.storage, old_key)
        remove_index_record(self.metadata, old_key)
        refresh_index_record(self.storage, self.metadata, new_key)

        logger.info("Image moved", extra={"old_key": old_key, "new_key": new_key})
