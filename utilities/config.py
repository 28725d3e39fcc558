"""
Configuration management using environment variables.
Handles server, logging and document store settings with validation and defaults.
"""

from typing import List, Optional
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Configuration class for the Books API.
    Uses pydantic BaseSettings for environment variable management.
    """

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    debug: bool = Field(default=False)
    cors_origins: List[str] = Field(default=["*"])

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    # Where the store connection parameters come from: "env" or "vault"
    config_source: str = Field(default="env")

    # Document Store Configuration
    store_endpoint: Optional[str] = Field(default="mongodb://localhost:27017")
    store_access_key: Optional[str] = Field(default=None)
    store_username: Optional[str] = Field(default=None)
    store_database: Optional[str] = Field(default="books")
    store_collection: Optional[str] = Field(default="books")

    # Secret Vault Configuration
    secret_endpoint_name: str = Field(default="books-api/store-endpoint")
    secret_access_key_name: str = Field(default="books-api/store-access-key")
    secret_database_name: str = Field(default="books-api/database-id")
    secret_collection_name: str = Field(default="books-api/collection-id")
    aws_region: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        """Ensure port is a usable TCP port."""
        if v < 1 or v > 65535:
            raise ValueError('port must be between 1 and 65535')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    @field_validator('config_source')
    @classmethod
    def validate_config_source(cls, v):
        """Ensure the store settings source is known."""
        valid_sources = ['env', 'vault']
        if v.lower() not in valid_sources:
            raise ValueError(f'config_source must be one of: {valid_sources}')
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def secret_names(self) -> dict:
        """Map store setting names to the vault secret that holds each one."""
        return {
            "endpoint": self.secret_endpoint_name,
            "access_key": self.secret_access_key_name,
            "database": self.secret_database_name,
            "collection": self.secret_collection_name,
        }


# Global configuration instance
config = AppConfig()
