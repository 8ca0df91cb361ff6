"""
Configuration and settings for the recipes backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.firebase_constants import RECIPES_COLLECTION


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")
    cors_origins: list[str] = Field(default=["*"])

    # Firebase
    firestore_recipe_collection: str = Field(default=RECIPES_COLLECTION)
    firebase_credentials: Optional[str] = Field(default=None)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="RECIPES_USE_IN_MEMORY_BACKENDS"
    )
    # Static bearer tokens accepted by the in-memory verifier.
    api_tokens: list[str] = Field(
        default_factory=list, validation_alias="RECIPES_API_TOKENS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
