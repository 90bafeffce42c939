from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True

    # Application
    app_name: str = "Email Link Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./mailshort.db"

    # Short links
    # When unset, the origin of the request that triggers the rewrite is used
    short_domain: Optional[str] = None
    short_code_length: int = 8
    max_allocation_attempts: int = 3

    # Documents
    max_html_bytes: int = 5 * 1024 * 1024  # 5 MiB
    soft_size_threshold: int = 102 * 1024  # 104448 bytes
    hard_size_threshold: int = 200 * 1024  # 204800 bytes
    max_filename_length: int = 160

    # Click tracking
    ip_hash_salt: str = "change-me-in-production"
    click_sink: str = "direct"  # Options: "direct", "queue"

    # Analytics
    histogram_buckets: int = 30
    recent_clicks_limit: int = 100
    links_page_size: int = 20
    recent_jobs_limit: int = 5

    # Cache settings
    cache_backend: str = "memory"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600  # Cache TTL in seconds (1 hour)

    # Queue settings (used when click_sink == "queue")
    queue_backend: str = "redis_streams"  # Options: "redis_streams", "memory"
    queue_name: str = "link_clicks"
    queue_consumer_group: str = "click_workers"
    queue_batch_size: int = 100  # Number of messages to process at once

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
