"""Application settings using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI Configuration (semantic analysis collaborator)
    openai_api_key: SecretStr = Field(..., description="OpenAI API Key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI model name")
    requirements_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    rubric_temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4000, ge=1)
    analysis_max_chars: int = Field(
        default=120_000, ge=1000, description="Text sent to the LLM is truncated to this length"
    )

    # LangSmith Configuration
    langchain_tracing_v2: bool = Field(default=False)
    langchain_api_key: SecretStr | None = Field(default=None)
    langchain_project: str = Field(default="rfp-intake")

    # Application Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_json: bool = Field(default=False, description="Render logs as JSON")
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development"
    )

    # Record store / queue database
    database_url: str = Field(default="sqlite:///./data/rfp_intake.db")

    # Uploads and blob storage
    upload_directory: Path = Field(default=Path("./data/uploads/temp"))
    storage_directory: Path = Field(default=Path("./data/uploads/rfps"))
    max_file_size_bytes: int = Field(default=50 * 1024 * 1024, ge=1)
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".pdf", ".doc", ".docx", ".txt", ".rtf"]
    )
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: [
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "text/plain",
            "application/rtf",
            "text/rtf",
        ]
    )
    hash_chunk_size: int = Field(default=64 * 1024, ge=1024)

    # Primary extraction service (Apache Tika server)
    extraction_service_url: str | None = Field(default="http://localhost:9998")
    extraction_timeout_seconds: float = Field(default=30.0, gt=0)
    extraction_service_retries: int = Field(
        default=1, ge=0, le=5, description="Extra attempts after a timeout"
    )

    # Analysis job queue
    queue_default_priority: int = Field(default=1)
    queue_max_attempts: int = Field(default=3, ge=1)
    queue_backoff_base_seconds: float = Field(default=2.0, ge=0.0)
    queue_backoff_max_seconds: float = Field(default=60.0, ge=0.0)
    queue_initial_delay_seconds: float = Field(default=1.0, ge=0.0)
    queue_visibility_timeout_seconds: float = Field(default=300.0, gt=0)

    # Analysis worker pool
    worker_pool_size: int = Field(default=2, ge=1, le=64)
    worker_poll_interval_seconds: float = Field(default=1.0, gt=0)
    worker_shutdown_timeout_seconds: float = Field(default=30.0, gt=0)
    worker_stats_interval_seconds: float = Field(default=60.0, gt=0)
    run_workers_in_api: bool = Field(
        default=False, description="Start the worker pool inside the API process"
    )

    # Authentication
    jwt_secret_key: SecretStr = Field(..., description="Secret used to validate access tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_audience: str | None = Field(default=None)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
