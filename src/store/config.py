"""
Record Proxy Configuration

This module provides configuration management for the items and users apps using
Pydantic Settings. All configuration values can be set via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class StoreConfig(BaseSettings):
    """
    Record Proxy Configuration

    All settings can be overridden via environment variables.
    Example: STORE_URL=https://xyz.supabase.co STORE_API_KEY=... uvicorn src.items.main:app
    """

    # ========== Remote Store Configuration ==========
    store_url: str = Field(
        default="http://localhost:54321",
        description="Remote store base URL (project URL of the hosted backend)"
    )
    store_api_key: str = Field(
        default="",
        description="API key sent as apikey header and bearer token"
    )
    store_rest_path: str = Field(
        default="/rest/v1",
        description="Path prefix of the REST data API"
    )
    store_auth_path: str = Field(
        default="/auth/v1",
        description="Path prefix of the auth API"
    )

    # ========== Collections ==========
    items_collection: str = Field(
        default="items",
        description="Collection holding item records"
    )
    users_collection: str = Field(
        default="users",
        description="Collection holding user records"
    )

    # ========== App Configuration ==========
    items_host: str = Field(
        default="0.0.0.0",
        description="Items app host address"
    )
    items_port: int = Field(
        default=8000,
        description="Items app port"
    )
    users_host: str = Field(
        default="0.0.0.0",
        description="Users API host address"
    )
    users_port: int = Field(
        default=8001,
        description="Users API port"
    )

    # ========== HTTP Timeout Configuration ==========
    http_connect_timeout: int = Field(
        default=5,
        description="HTTP connection timeout in seconds"
    )
    http_read_timeout: int = Field(
        default=30,
        description="HTTP read timeout in seconds"
    )

    # ========== Logging Configuration ==========
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=False,
        description="Whether to output logs in JSON format"
    )

    # ========== Web Configuration ==========
    flash_cookie_name: str = Field(
        default="flash",
        description="Cookie carrying the one-request flash message"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global configuration instance
config = StoreConfig()


def get_config() -> StoreConfig:
    """
    Get the global configuration instance.

    This function is used for dependency injection in FastAPI.

    Returns:
        StoreConfig: The global configuration instance
    """
    return config
