"""Share link record model."""

from pydantic import BaseModel, ConfigDict, Field


class ShareRecord(BaseModel):
    """A public, time-limited grant of read access to one image.

    Valid while ``expires_at >= now``. Times are epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    share_token: str = Field(..., alias="shareToken")
    image_key: str = Field(..., alias="imageKey")
    created_at: int = Field(..., alias="createdAt")
    expires_at: int = Field(..., alias="expiresAt")
    created_by: str | None = Field(None, alias="createdBy")

    def to_item(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_expired(self, now: int) -> bool:
        return self.expires_at < now
