"""
Upload Schemas
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response for the file upload endpoint."""

    success: bool = True
    filename: str = Field(description="Stored filename (timestamp-prefixed)")
    original_name: str = Field(
        alias="originalName",
        description="Filename as sent by the client, before sanitization",
    )
    path: str = Field(description="Storage path relative to DATA_DIR")
    size: int = Field(description="Bytes written")
    type: str = Field(description="Lower-cased file extension")

    model_config = ConfigDict(populate_by_name=True)
