"""Application settings and configuration.

This module defines all configuration options for the Babel Board service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Babel Board", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./babel.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for the ranked feed cache
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Moderation and content limits
    report_threshold: int = Field(default=10, alias="REPORT_THRESHOLD")
    max_comments_per_post: int = Field(default=500, alias="MAX_COMMENTS_PER_POST")
    edit_cooldown_minutes: int = Field(default=60, alias="EDIT_COOLDOWN_MINUTES")

    # Feed windows and ranking bounds
    ranked_window_days: int = Field(default=7, alias="RANKED_WINDOW_DAYS")
    ranking_max_posts: int = Field(default=500, alias="RANKING_MAX_POSTS")
    feed_page_size: int = Field(default=50, alias="FEED_PAGE_SIZE")
    newest_window_days: int = Field(default=60, alias="NEWEST_WINDOW_DAYS")
    prefix_window_days: int = Field(default=60, alias="PREFIX_WINDOW_DAYS")

    # Ranked feed cache: "memory", "redis" or "none"
    feed_cache_backend: str = Field(default="memory", alias="FEED_CACHE_BACKEND")
    feed_cache_ttl_seconds: int = Field(default=300, alias="FEED_CACHE_TTL_SECONDS")

    # Category prefixes matched with alef-tolerant comparison
    alef_variant_positions: int = Field(default=2, alias="ALEF_VARIANT_POSITIONS")
    ask_title_prefix: str = Field(default="اسال بابل: ", alias="ASK_TITLE_PREFIX")
    share_title_prefix: str = Field(default="شارك بابل: ", alias="SHARE_TITLE_PREFIX")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
