"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field
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
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Metadata scanner
    scanner_timeout: float = Field(default=10.0, validation_alias="SCANNER_TIMEOUT")
    scanner_user_agent: str = Field(
        default="WapsBot/1.0 (+https://waps.app)",
        validation_alias="SCANNER_USER_AGENT",
    )
    # Characters of page body fed to the category heuristic
    scanner_body_prefix: int = Field(default=4000, validation_alias="SCANNER_BODY_PREFIX")

    # Public discovery board that newly added websites land in
    seed_owner_key: str = Field(default="seed", validation_alias="SEED_OWNER_KEY")
    seed_board_slug: str = Field(default="discover", validation_alias="SEED_BOARD_SLUG")

    # Field length limits
    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")
    max_description_length: int = Field(
        default=2000, validation_alias="MAX_DESCRIPTION_LENGTH",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite (local development and tests)."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
