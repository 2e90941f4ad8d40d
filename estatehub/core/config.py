"""
Centralized application configuration implementing the 12-Factor App methodology.
Every tunable of the service is read from environment variables or a local .env file.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immutable configuration schema backed by environment variables."""

    APP_NAME: str = "EstateHub"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"

    # Mortgage routes are mounted under {API_PREFIX}/mortgage
    API_PREFIX: str = "/api"

    CORS_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:3000",
        "http://localhost:5000",
    ]

    # Fixed-window limiter: exceeding the limit blocks the client IP for RATE_LIMIT_BLOCK_SECONDS
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_BLOCK_SECONDS: int = 900

    # Peers allowed to set X-Forwarded-For (comma separated, "*" trusts any). The limiter keys on the resolved client IP
    TRUSTED_PROXY_HOSTS: str = "127.0.0.1"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
