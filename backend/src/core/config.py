"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Scopes core store entries (e.g. the first-run flag) per deployment environment
    environment: str = Field(default="development", validation_alias="APP_ENV")

    # Seed dataset and the local asset files it references by name
    seed_data_path: Path = Field(
        default=Path("backend/data/data.json"),
        validation_alias="SEED_DATA_PATH",
    )
    seed_uploads_dir: Path = Field(
        default=Path("backend/data/uploads"),
        validation_alias="SEED_UPLOADS_DIR",
    )

    # Local upload provider - where uploaded bytes land and how they are addressed
    upload_dir: Path = Field(default=Path("public/uploads"), validation_alias="UPLOAD_DIR")
    upload_url_prefix: str = Field(default="/uploads", validation_alias="UPLOAD_URL_PREFIX")

    # HTTP
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Reject an empty environment name; store entries are keyed by it."""
        v = v.strip()
        if not v:
            raise ValueError("APP_ENV must not be empty")
        return v

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Normalize the API prefix to '' or '/segment' without a trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError(f"API_PREFIX must start with '/': {v!r}")
        return v

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
