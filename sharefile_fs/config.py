# config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application configuration with type validation.
    Automatically reads variables from the environment and the .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- ShareFile Settings ---
    SHAREFILE_SUBDOMAIN: str
    SHAREFILE_ACCESS_TOKEN: str
    SHAREFILE_ROOT_PREFIX: str = ""
    SHAREFILE_INCLUDE_RAW_ITEM: bool = False
    SHAREFILE_REQUEST_TIMEOUT: float = 30
    SHAREFILE_UPLOAD_CHUNK_SIZE: int = Field(8 * 1024 * 1024, gt=0)  # 8 MB default

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[Path] = None

    @field_validator("SHAREFILE_SUBDOMAIN", "SHAREFILE_ACCESS_TOKEN")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("SHAREFILE_ROOT_PREFIX")
    @classmethod
    def trim_prefix(cls, value: str) -> str:
        return (value or "").strip().strip("/")


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    return Settings()
