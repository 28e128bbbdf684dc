"""
Configuration management for the HR Sourcing Agent.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Candidate search API (RapidAPI LinkedIn data)
    rapid_api_base: str = ""
    rapid_api_key: str = ""
    search_poll_interval: float = 2.0  # seconds between status checks
    search_max_attempts: int = 30
    search_max_limit: int = 50
    search_timeout: float = 30.0  # per HTTP call

    # Agent platform
    agent_base_url: str = "https://agent-prod.studio.lyzr.ai"
    agent_timeout: float = 180.0  # agent waits on the tool, which waits on the poll loop

    # Auth
    encryption_key: str = "default-secret-key-that-is-long-enough"
    api_auth_token: str = ""

    # Database
    database_url: str = ""

    # Tool result delivery: "session" (database + cache fallback) or "memory"
    result_publisher: str = "session"
    result_cache_ttl: float = 600.0
    result_cache_sweep_interval: float = 300.0

    # API
    cors_origins: str = "*"
    chat_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars


settings = Settings()
