"""Abstract contract for the image metadata index."""

from abc import ABC, abstractmethod

from core.models.image import IndexRecord, TagCount


class ImageMetadataRepository(ABC):
    """Contract for the per-folder sortable index of image metadata.

    The index is a cache of object storage state. Implementations could be
    DynamoDB, PostgreSQL, etc.
    """

    @abstractmethod
    def upsert(self, record: IndexRecord) -> None:
        """Insert or replace the record for ``record.key``.

        Raises:
            DynamoDBError: If the write fails
        """

    @abstractmethod
    def get(self, key: str) -> IndexRecord | None:
        """Return the record for ``key`` or None."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the record for ``key``. Absent records are not an error."""

    @abstractmethod
    def update_tags(self, key: str, tags: list[str]) -> bool:
        """Set ``tags`` and ``tagCount`` on an existing record.

        Returns:
            False if no record exists for ``key``
        """

    @abstractmethod
    def query(
        self,
        folder: str,
        sort_by: str = "date",
        order: str = "desc",
        limit: int = 100,
        cursor: str | None = None,
    ) -> tuple[list[IndexRecord], str | None]:
        """Return one page of a folder in the requested order.

        Raises:
            ValidationError: If sort field, order, limit or cursor are invalid
            DynamoDBError: If the query fails
        """

    @abstractmethod
    def batch_upsert(self, records: list[IndexRecord]) -> int:
        """Write many records in bounded chunks.

        Returns:
            Number of store calls issued
        """

    @abstractmethod
    def scan_tag_counts(self) -> list[TagCount]:
        """Count tag occurrences across the whole index."""
