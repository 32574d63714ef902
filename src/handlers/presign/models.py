"""Pydantic models for presigned URL requests."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import MAX_PRESIGNED_URL_EXPIRATION, PRESIGNED_URL_EXPIRATION


class PresignRequest(BaseModel):
    """Body of ``POST /api/presign``."""

    model_config = ConfigDict(populate_by_name=True)

    operation: Literal["get", "put", "delete"]
    key: str = Field(..., min_length=1)
    content_type: str | None = Field(None, alias="contentType")
    expires_in: int = Field(PRESIGNED_URL_EXPIRATION, alias="expiresIn", ge=1)

    def capped_expiry(self) -> int:
        return min(self.expires_in, MAX_PRESIGNED_URL_EXPIRATION)


class PresignResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    expires_in: int = Field(..., alias="expiresIn")
