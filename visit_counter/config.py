"""
Configuration settings for the visit counter.

Uses Pydantic Settings to load environment variables for the database
connection secrets, logging, and HTTP serving. Values are read fresh on every
call to `get_settings` so a long-lived worker picks up rotated secrets.
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from visit_counter.errors import ConfigurationError


class Settings(BaseSettings):
    # Database
    libsql_client_url: Optional[str] = Field(None, alias="LIBSQL_CLIENT_URL")
    libsql_client_token: Optional[SecretStr] = Field(None, alias="LIBSQL_CLIENT_TOKEN")
    db_timeout_seconds: float = Field(10.0, alias="DB_TIMEOUT_SECONDS", gt=0)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    worker_version: Optional[str] = Field(None, alias="WORKER_VERSION")
    legacy_error_status: bool = Field(False, alias="LEGACY_ERROR_STATUS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # HTTP server
    host: str = Field("127.0.0.1", alias="HOST")
    port: int = Field(8787, alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def database_credentials(self) -> Tuple[str, str]:
        """
        Return the (url, token) pair needed to open a connection.

        Raises
        ------
        ConfigurationError
            If either secret is unset or empty.
        """
        if not self.libsql_client_url:
            raise ConfigurationError("LIBSQL_CLIENT_URL is not configured")
        token = self.libsql_client_token.get_secret_value() if self.libsql_client_token else ""
        if not token:
            raise ConfigurationError("LIBSQL_CLIENT_TOKEN is not configured")
        return self.libsql_client_url, token


def get_settings() -> Settings:
    """
    Build Settings from the current environment.

    Not cached: each request resolves its own copy.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
