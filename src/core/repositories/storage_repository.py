"""Abstract contract for image file storage."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


class ImageStorageRepository(ABC):
    """Contract for storing and retrieving image objects.

    Implementations could be S3, GCS, local disk, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def head_image(self, *, key: str) -> dict[str, Any]:
        """Return object attributes and user metadata.

        Raises:
            NotFoundError: If the object does not exist
            S3Error: If the request fails
        """

    @abstractmethod
    def exists(self, *, key: str) -> bool:
        """Probe for an object without downloading it.

        Raises:
            S3Error: If the existence check fails for a reason other than absence
        """

    @abstractmethod
    def download_image(self, *, key: str) -> bytes:
        """Download object bytes.

        Raises:
            NotFoundError: If the object does not exist
            S3Error: If the download fails
        """

    @abstractmethod
    def upload_image(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
        cache_control: str | None = None,
    ) -> None:
        """Store object bytes.

        Raises:
            S3Error: If the upload fails
        """

    @abstractmethod
    def create_folder(self, *, prefix: str) -> None:
        """Write an empty folder marker object at ``prefix``.

        Raises:
            S3Error: If the write fails
        """

    @abstractmethod
    def remove_image(self, *, key: str) -> None:
        """Delete a single object. Deleting an absent key is not an error.

        Raises:
            S3Error: If the deletion fails
        """

    @abstractmethod
    def remove_images(self, *, keys: list[str]) -> list[str]:
        """Delete many objects, returning the keys that failed.

        Raises:
            S3Error: If a whole request fails
        """

    @abstractmethod
    def copy_image(self, *, source_key: str, dest_key: str) -> None:
        """Copy an object, keeping its metadata.

        Raises:
            NotFoundError: If the source does not exist
            S3Error: If the copy fails
        """

    @abstractmethod
    def replace_metadata(
        self,
        *,
        key: str,
        metadata: dict[str, str],
        content_type: str | None = None,
    ) -> None:
        """Overwrite an object's user metadata in place.

        Raises:
            NotFoundError: If the object does not exist
            S3Error: If the copy fails
        """

    @abstractmethod
    def list_page(
        self,
        *,
        prefix: str = "",
        max_keys: int = 1000,
        continuation_token: str | None = None,
        delimiter: str | None = None,
    ) -> dict[str, Any]:
        """Return one listing page as the raw ``list_objects_v2`` response.

        Raises:
            S3Error: If the listing fails
        """

    @abstractmethod
    def iter_objects(self, *, prefix: str = "") -> Iterator[dict[str, Any]]:
        """Yield every object under ``prefix``, following continuation tokens."""

    @abstractmethod
    def generate_presigned_url(
        self,
        *,
        operation: str,
        key: str,
        expires_in: int,
        content_type: str | None = None,
    ) -> str:
        """Return a time-limited URL for get, put or delete on ``key``.

        Raises:
            S3Error: If signing fails
        """
