"""Pydantic models for tag requests/responses."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ImageKeyPath(BaseModel):
    key: str = Field(..., min_length=1, description="URL-encoded object key")


class UpdateTagsRequest(BaseModel):
    # Element rules live in validate_tags so they surface as 400s.
    tags: Any = Field(..., description="List of tag strings")


class TagCountsRequest(BaseModel):
    source: Literal["s3", "index"] = "s3"


class UpdateTagsResponse(BaseModel):
    success: bool = True
    tags: list[str]
