"""Pydantic models for share link requests/responses."""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import DEFAULT_SHARE_EXPIRY_DAYS


class CreateShareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_key: str = Field(..., alias="imageKey", min_length=1)
    # Clamped to 1..30 by the token service rather than rejected.
    expires_in_days: int | None = Field(DEFAULT_SHARE_EXPIRY_DAYS, alias="expiresInDays")


class ShareTokenPath(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    token: str = Field(..., min_length=1)


class CreateShareResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    share_token: str = Field(..., alias="shareToken")
    share_url: str = Field(..., alias="shareUrl")
    expires_at: int = Field(..., alias="expiresAt", description="Epoch milliseconds")


class SharedImageResponse(BaseModel):
    """What an anonymous visitor of a share link gets to see."""

    model_config = ConfigDict(populate_by_name=True)

    image_key: str = Field(..., alias="imageKey")
    image_url: str = Field(..., alias="imageUrl")
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")
    preview_url: str | None = Field(None, alias="previewUrl")
    name: str
    size: int
    last_modified: int = Field(..., alias="lastModified")
    tags: list[str] = Field(default_factory=list)
