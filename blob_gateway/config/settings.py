"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (and an optional .env
file) exactly once per process. The resulting Settings object is handed to
the application factory and travels to request handlers through app.state,
so nothing re-reads the environment while serving traffic.

Mock mode enables local development without an Azure storage account.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variable names match the field names (case-insensitive),
    e.g. AZURE_STORAGE_ACCOUNT_NAME, AZURE_STORAGE_SAS_TOKEN, PORT.
    """

    # API Configuration
    api_title: str = "Blob Gateway API"
    api_version: str = "v1"

    # Azure Blob Storage Configuration
    azure_storage_account_name: str = Field(
        default="",
        description="Storage account name, e.g. 'mystorageacct'"
    )
    azure_storage_sas_token: str = Field(
        default="",
        description="SAS token granting access to the container. A leading '?' is accepted."
    )
    azure_container_name: str = Field(
        default="",
        description="Container that holds every object served by this gateway"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory storage instead of Azure. Enables local dev without an account."
    )
    download_chunk_size: int = Field(
        default=4 * 1024 * 1024,
        gt=0,
        description="Bytes per chunk when streaming downloads back to the client"
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    port: int = Field(
        default=3000,
        description="Port the HTTP server listens on"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing environment variable names. The container
        is always required; account and SAS token only when talking to
        real Azure storage.
        """
        missing = []

        if not self.storage_mock_mode:
            if not self.azure_storage_account_name.strip():
                missing.append("AZURE_STORAGE_ACCOUNT_NAME")
            if not self.azure_storage_sas_token.strip().lstrip("?"):
                missing.append("AZURE_STORAGE_SAS_TOKEN")

        if not self.azure_container_name.strip():
            missing.append("AZURE_CONTAINER_NAME")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, either pass an
    explicit Settings to create_app or call get_settings.cache_clear().
    """
    return Settings()
