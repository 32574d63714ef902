"""Business logic for the folder hierarchy.

Folders are key prefixes. An empty object whose key ends in ``/`` keeps an
otherwise empty folder visible.
"""

from typing import Any

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_metadata import DynamoDBMetadata
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import S3Error, ValidationError
from core.services.indexing import remove_index_record
from core.utils.concurrency import run_bounded
from core.utils.constants import DERIVATIVE_PREFIXES, ERROR_CODE_IMAGE_DELETE_FAILED
from core.utils.keys import is_derivative_key, is_folder_marker

from .models import Folder

logger = Logger(UTC=True)


class FolderService:
    def __init__(self) -> None:
        self.storage = S3ImageStorage()
        self.metadata = DynamoDBMetadata()

    def list_folders(self, prefix: str) -> list[dict[str, Any]]:
        """Return the immediate sub-folders of ``prefix``, hiding derivative trees."""
        folders: list[dict[str, Any]] = []
        token: str | None = None

        while True:
            page = self.storage.list_page(
                prefix=prefix,
                delimiter="/",
                continuation_token=token,
            )

            for entry in page.get("CommonPrefixes", []):
                path = entry.get("Prefix")
                if not path or path.startswith(DERIVATIVE_PREFIXES):
                    continue
                name = path[len(prefix) :].rstrip("/")
                folders.append(Folder(name=name, path=path).model_dump())

            if not page.get("IsTruncated"):
                break
            token = page.get("NextContinuationToken")

        logger.debug("Folders listed", extra={"prefix": prefix, "count": len(folders)})
        return folders

    def create_folder(self, prefix: str) -> None:
        self._require_folder(prefix)
        self.storage.create_folder(prefix=prefix)

    def delete_folder(self, prefix: str) -> int:
        """Delete every object under ``prefix`` together with its derivatives.

        Index records of the deleted originals are removed best-effort.
        Returns the number of objects deleted.

        Raises:
            ValidationError: If ``prefix`` is the bucket root
            S3Error: If listing fails or any object could not be deleted
        """
        self._require_folder(prefix)

        originals = [obj["Key"] for obj in self.storage.iter_objects(prefix=prefix)]
        derivatives = [
            obj["Key"]
            for derivative_prefix in DERIVATIVE_PREFIXES
            for obj in self.storage.iter_objects(prefix=f"{derivative_prefix}{prefix}")
        ]

        seen = set(originals)
        keys = originals + [key for key in derivatives if key not in seen]
        failed = self.storage.remove_images(keys=keys)

        if failed:
            raise S3Error(
                message="Unable to delete every object in the folder",
                error_code=ERROR_CODE_IMAGE_DELETE_FAILED,
                details={"prefix": prefix, "failed": len(failed)},
            )

        indexed = [
            key for key in originals if not is_folder_marker(key) and not is_derivative_key(key)
        ]
        run_bounded(lambda key: remove_index_record(self.metadata, key), indexed)

        logger.info(
            "Folder deleted",
            extra={"prefix": prefix, "objects": len(originals), "derivatives": len(derivatives)},
        )
        return len(keys)

    @staticmethod
    def _require_folder(prefix: str) -> None:
        if not prefix:
            raise ValidationError(
                message="Missing required field: path",
                details={"path": prefix},
            )
