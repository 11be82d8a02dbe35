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
    database_url: str = "sqlite+aiosqlite:///./data/dashmarks.db"

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    # Metadata scraping
    metadata_timeout: float = Field(default=8.0, gt=0)
    # Formatted with the page hostname when a site declares no usable icon
    favicon_service_url: str = "https://favicon.im/{hostname}"

    # Pagination
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Insert the default categories into an empty database on startup
    seed_default_categories: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    def favicon_for(self, hostname: str) -> str:
        """Build the third-party favicon service URL for a hostname."""
        return self.favicon_service_url.format(hostname=hostname)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
