"""Configuration settings for the Rift Reviewer backend."""

from __future__ import annotations

from typing import List, Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    postgres_db: str = Field(default="rift_reviewer_db")
    postgres_user: str = Field(default="rift_reviewer_user")
    postgres_password: str = Field(default="dev_password")
    postgres_host: str = Field(default="postgres")
    postgres_port: int = Field(default=5432)
    database_url_override: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL, takes precedence over the postgres_* fields",
    )

    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # CORS Configuration
    cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [
            origin.strip() for origin in self.cors_origins.split(",") if origin.strip()
        ]

    # Riot API Configuration
    riot_api_key: str = Field(default="", description="Static Riot API key")
    riot_default_region: str = Field(default="americas")
    riot_request_timeout: float = Field(
        default=5.0, description="Per-call timeout for upstream requests in seconds"
    )
    riot_rate_limit_retries: int = Field(
        default=2, description="How many times a 429 response is retried"
    )
    riot_max_match_count: int = Field(default=100)
    match_history_days: int = Field(default=365)
    default_match_count: int = Field(default=20)

    # Match Record Store
    match_record_ttl_days: int = Field(default=30)

    # Fast Object Cache
    object_cache_backend: Literal["s3", "memory"] = Field(default="memory")
    object_cache_bucket: str = Field(default="match-cache-bucket")
    object_cache_prefix: str = Field(default="")
    object_cache_endpoint_url: str | None = Field(default=None)
    object_cache_max_age_days: int = Field(default=365)
    object_cache_memory_maxsize: int = Field(default=5000)
    aws_region: str = Field(default="us-east-1")

    # Concurrency
    ingest_concurrency: int = Field(
        default=5, description="Maximum parallel match resolutions per ingestion"
    )
    side_task_workers: int = Field(default=2)
    side_task_queue_size: int = Field(default=1000)

    # Insights
    insights_enabled: bool = Field(default=False)
    bedrock_model_id: str = Field(default="anthropic.claude-3-5-haiku-20241022-v1:0")
    bedrock_region: str = Field(default="us-east-1")

    @field_validator(
        "riot_request_timeout",
        "ingest_concurrency",
        "side_task_workers",
        "side_task_queue_size",
        "default_match_count",
        "riot_max_match_count",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Reject zero or negative limits."""
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("riot_default_region")
    @classmethod
    def normalize_routing(cls, v: str) -> str:
        """Routing values are matched case-insensitively."""
        return v.strip().lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
