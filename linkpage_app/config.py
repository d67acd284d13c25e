from pydantic_settings import BaseSettings, SettingsConfigDict


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
    log_level: str = "INFO"

    # Application
    app_name: str = "Link Page"
    app_version: str = "1.0.0"

    # Database
    database_url: str = "sqlite:///./linkpage.db"

    # Public URLs (pages live under /p/{slug}, shortlinks under /s/{code})
    base_url: str = "http://127.0.0.1:8000"

    # Shortlink code generation
    short_code_strategy: str = "random"  # Options: "random", "base62"
    short_code_length: int = 6
    short_code_salt: int = 1256  # Salt for Base62 strategy
    max_retries: int = 5

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 300  # Public page payloads go stale quickly

    # Plan tiers (identity itself comes from the upstream auth gateway)
    default_plan: str = "free"
    free_plan_page_limit: int = 1

    # Analytics
    analytics_summary_max_days: int = 90

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
