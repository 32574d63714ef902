"""Shared image models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.utils.constants import INDEX_ROOT_FOLDER
from core.utils.keys import folder_of, name_of


class IndexRecord(BaseModel):
    """Metadata index record for one original image.

    Field aliases are the DynamoDB attribute names. ``tag_count`` always
    equals ``len(tags)``. The root folder is ``""`` here and
    ``INDEX_ROOT_FOLDER`` in the stored item. ``folder`` and ``name`` are
    derived from ``key`` when not given.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., description="S3 object key")
    name: str = Field("", description="Last path segment of the key")
    size: int = Field(..., ge=0, description="Object size in bytes")
    last_modified: int = Field(..., alias="lastModified", description="Epoch milliseconds")
    tags: list[str] = Field(default_factory=list)
    tag_count: int = Field(0, alias="tagCount")
    folder: str = Field("", description="Key prefix up to and including the last '/'")
    thumbnail_key: str | None = Field(None, alias="thumbnailKey")
    preview_key: str | None = Field(None, alias="previewKey")
    updated_at: int | None = Field(None, alias="updatedAt", description="Epoch milliseconds")

    @model_validator(mode="before")
    @classmethod
    def _derive_location(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("key"), str):
            return data

        data = dict(data)
        if data.get("folder") is None:
            data["folder"] = folder_of(data["key"])
        if not data.get("name"):
            data["name"] = name_of(data["key"])
        return data

    @field_validator("folder")
    @classmethod
    def _root_folder(cls, value: str) -> str:
        return "" if value == INDEX_ROOT_FOLDER else value

    @model_validator(mode="after")
    def _sync_tag_count(self) -> "IndexRecord":
        self.tag_count = len(self.tags)
        return self

    def to_item(self) -> dict:
        """Serialize to a DynamoDB item (camelCase, no null attributes)."""
        item = self.model_dump(by_alias=True, exclude_none=True)
        item["folder"] = self.folder or INDEX_ROOT_FOLDER
        return item


class TagCount(BaseModel):
    tag: str
    count: int


class ImageSummary(BaseModel):
    """One image as returned by the list and query routes."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    name: str
    size: int
    last_modified: int = Field(..., alias="lastModified")
    url: str
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")
    preview_url: str | None = Field(None, alias="previewUrl")
    tags: list[str] = Field(default_factory=list)
    folder: str | None = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
