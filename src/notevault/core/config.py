"""
Application Configuration

Centralized settings management using Pydantic BaseSettings.
All values are loaded from environment variables or .env file.
"""

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_AUTH_USERS = "admin:changeme123"


class Settings(BaseSettings):
    """
    Application settings with environment variable binding.

    All fields have defaults so the service starts on a fresh checkout.

    Optional env vars:
        DATA_DIR (./data), AUTH_USERS (admin:changeme123), SESSION_SECRET,
        SESSION_MAX_AGE (14 days), MAX_UPLOAD_SIZE (4 GiB - 1),
        ALLOWED_UPLOAD_EXTENSIONS (comma-separated, e.g. "md,txt,png";
        a JSON list also works), SHARE_PAGE (/share.html), LOG_LEVEL (INFO)
    """

    PROJECT_NAME: str = "NoteVault"

    # Storage
    DATA_DIR: Path = Path("data")

    # Authentication: "user:password,user2:password2"
    AUTH_USERS: str = DEFAULT_AUTH_USERS
    SESSION_SECRET: str | None = None
    SESSION_MAX_AGE: int = 14 * 24 * 60 * 60

    # Uploads
    MAX_UPLOAD_SIZE: int = 4 * 1024 * 1024 * 1024 - 1  # FAT32 file size limit
    ALLOWED_UPLOAD_EXTENSIONS: Annotated[set[str], NoDecode] = Field(
        default_factory=lambda: {
            "md",
            "txt",
            "pdf",
            "png",
            "jpg",
            "jpeg",
            "gif",
            "webp",
            "svg",
        }
    )

    # Sharing
    SHARE_PAGE: str = "/share.html"

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("ALLOWED_UPLOAD_EXTENSIONS", mode="before")
    @classmethod
    def split_extensions(cls, value: Any) -> Any:
        """Accept "md,txt" as well as '["md", "txt"]' from the environment."""
        if not isinstance(value, str):
            return value
        if value.strip().startswith("["):
            return json.loads(value)
        return {part.strip() for part in value.split(",") if part.strip()}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",  # Silently ignore unknown env vars
    )

    @property
    def NOTES_DIR(self) -> Path:
        """Directory holding notes created through the API."""
        return self.DATA_DIR / "notes"

    @property
    def UPLOADS_DIR(self) -> Path:
        """Directory holding uploaded files (markdown or otherwise)."""
        return self.DATA_DIR / "uploads"

    @property
    def INDEX_FILE(self) -> Path:
        """The index document listing every known note."""
        return self.DATA_DIR / "notes-index.json"


settings = Settings()
