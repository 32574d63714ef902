"""Pydantic models for the bucket listing request."""

from pydantic import BaseModel, ConfigDict, Field

from core.utils.constants import DEFAULT_LIMIT, MAX_LIMIT


class ListImagesRequest(BaseModel):
    """Query parameters of ``GET /api/s3/list``.

    ``maxKeys`` above 1000 is capped rather than rejected; non-numeric or
    non-positive values fall back to the default.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    prefix: str | None = Field(None, description="Folder prefix")
    max_keys: str | None = Field(None, alias="maxKeys")
    continuation_token: str | None = Field(None, alias="continuationToken")

    def page_size(self) -> int:
        try:
            value = int(self.max_keys) if self.max_keys else DEFAULT_LIMIT
        except ValueError:
            value = DEFAULT_LIMIT
        if value < 1:
            value = DEFAULT_LIMIT
        return min(value, MAX_LIMIT)
