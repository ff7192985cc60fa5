"""
API configuration settings.
"""

from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class APIConfig(BaseSettings):
    """API configuration settings, read from the environment and ``.env``."""

    # API Settings
    api_title: str = "Bookshelf API"
    api_version: str = "1.0.0"
    api_description: str = "In-memory book catalog with bearer token authentication"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Credentials accepted by POST /auth/token
    auth_username: str = "admin"
    auth_password: str = "secret"

    # Token Settings
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # CORS Settings
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v):
        """Only keyed-hash signing is supported."""
        if v.upper() not in HMAC_ALGORITHMS:
            raise ValueError(f"algorithm must be one of: {list(HMAC_ALGORITHMS)}")
        return v.upper()

    @field_validator("access_token_expire_hours")
    @classmethod
    def validate_expire_hours(cls, v):
        """Ensure tokens have a positive validity window."""
        if v < 1:
            raise ValueError("access_token_expire_hours must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()


# Global config instance
config = APIConfig()
