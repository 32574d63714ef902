"""Pydantic models for folder requests/responses."""

from pydantic import BaseModel, ConfigDict, Field


class ListFoldersRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    prefix: str | None = Field(None, description="Parent folder, root when omitted")


class FolderPathRequest(BaseModel):
    """Body of folder create and delete requests."""

    model_config = ConfigDict(str_strip_whitespace=True)

    path: str = Field(..., min_length=1, description="Folder path, with or without trailing '/'")


class Folder(BaseModel):
    name: str
    path: str
