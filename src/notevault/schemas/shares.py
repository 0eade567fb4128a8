"""
Share Schemas

Pydantic models for share link creation, revocation and public resolution.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ShareCreate(BaseModel):
    """Request body for POST /shares."""

    path: str = Field(..., min_length=1, description="Path of the note to share")
    burn_after_reading: bool = Field(
        default=False,
        alias="burnAfterReading",
        description="Delete the note after the first successful read",
    )
    password: str | None = Field(
        default=None,
        min_length=1,
        description="Optional password required to open the link",
    )

    model_config = ConfigDict(populate_by_name=True)


class ShareRevoke(BaseModel):
    """Request body for DELETE /shares."""

    path: str = Field(..., min_length=1)


class ShareCreated(BaseModel):
    success: bool = True
    share_token: str = Field(alias="shareToken")
    share_url: str = Field(alias="shareUrl")
    burn_after_reading: bool = Field(alias="burnAfterReading")

    model_config = ConfigDict(populate_by_name=True)


class ShareRevoked(BaseModel):
    success: bool = True
    path: str


class SharedNote(BaseModel):
    """Public response when a share token is resolved."""

    success: bool = True
    name: str
    content: str
    burn_after_reading: bool = Field(alias="burnAfterReading")

    model_config = ConfigDict(populate_by_name=True)
