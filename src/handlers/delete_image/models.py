"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, Field


class DeleteImageRequest(BaseModel):
    """Validation model for delete image request."""

    key: str = Field(
        ...,
        min_length=1,
        description="Object key of the image to delete",
    )


class SuccessResponse(BaseModel):
    success: bool = True
