"""Abstract contract for share link persistence."""

from abc import ABC, abstractmethod

from core.models.share import ShareRecord


class ShareRepository(ABC):
    """Contract for storing share records keyed by token."""

    @abstractmethod
    def put(self, record: ShareRecord) -> bool:
        """Store a new record.

        Returns:
            False if the token is already taken
        """

    @abstractmethod
    def get(self, token: str) -> ShareRecord | None:
        """Return the stored record, expired or not."""

    @abstractmethod
    def exists(self, token: str) -> bool:
        """Probe whether a token is already taken."""

    @abstractmethod
    def delete(self, token: str) -> None:
        """Remove a record. Absent tokens are not an error."""
