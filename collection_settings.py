"""
Collection Settings - Environment-driven defaults for a new collection.

Values are read from the environment (or a .env file) and validated by
Pydantic. Protocol constants live in collection_config.py instead.
"""
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Collection parameters used by NftCollection.from_settings().
    """

    # --- Collection ---
    COLLECTION_NAME: str = "Collection"
    COLLECTION_DESCRIPTION: str = ""
    TOKEN_PREFIX: str = "Item"

    # --- Sale Parameters ---
    MAX_SUPPLY: int = Field(default=10000, gt=0)
    MAX_PER_TX: int = Field(default=20, gt=0)
    UNIT_PRICE: int = Field(default=50_000_000, ge=0)  # lovelace (50 ADA)

    # --- Metadata ---
    # e.g. "ipfs://<metadata folder CID>/"
    BASE_URI: str = ""
    IMAGE_BASE_URI: str = ""

    # --- Logging ---
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


settings = Settings()
