"""Pydantic models for index queries."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import DEFAULT_LIMIT, MAX_LIMIT, MIN_LIMIT


class QueryImagesRequest(BaseModel):
    """Query parameters of ``GET /api/images``."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    folder: str | None = Field(None, description="Folder prefix, root when omitted")
    sort_by: Literal["name", "date", "size", "tags"] = Field("date", alias="sortBy")
    order: Literal["asc", "desc"] = "desc"
    limit: int = Field(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)
    cursor: str | None = None
