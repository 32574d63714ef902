"""Pydantic models for move image requests."""

from pydantic import BaseModel, ConfigDict, Field


class MoveImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_key: str = Field(..., alias="oldKey", min_length=1)
    new_key: str = Field(..., alias="newKey", min_length=1)
