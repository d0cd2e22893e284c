"""
Dashboard Engine - Configuration

Typed configuration using Pydantic Settings.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OllamaSettings(BaseSettings):
    """Ollama LLM configuration for chart explanations."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama API base URL"
    )
    model: str = Field(
        default="llama3.2:latest",
        description="Model used for chart explanations"
    )
    timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        description="Maximum retry attempts"
    )
    retry_backoff: float = Field(
        default=1.0,
        description="Seconds before the first retry, doubled on each attempt"
    )
    temperature: float = Field(default=0.3, description="Sampling temperature")
    max_tokens: int = Field(default=1024, description="Maximum tokens per explanation")


class CacheSettings(BaseSettings):
    """Caching configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    enabled: bool = Field(default=True, description="Enable derivation caching")
    max_size: int = Field(default=128, description="LRU cache max size")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")


class DashboardSettings(BaseSettings):
    """Derivation engine configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    # Type inference
    sample_rows: int = Field(
        default=100,
        description="Rows sampled for column type inference"
    )
    temporal_threshold: float = Field(
        default=0.8,
        description="Share of parseable instants above which a column is temporal"
    )

    # Statistics
    histogram_bins: int = Field(default=20, description="Equal-width histogram bins")
    outlier_iqr_multiplier: float = Field(
        default=1.5,
        description="IQR multiplier for box plot fences"
    )
    max_outliers_reported: int = Field(
        default=200,
        description="Outlier values returned with a box plot"
    )

    # Categories
    category_batch_size: int = Field(
        default=10000,
        description="Rows scanned per categorical aggregation batch"
    )
    max_categories: int = Field(
        default=100,
        description="Distinct labels retained by the aggregator"
    )
    treemap_top_k: int = Field(default=15, description="Top-K for hierarchical views")
    pie_top_k: int = Field(default=6, description="Top-K for proportional views")

    # Time series
    max_series_points: int = Field(
        default=1000,
        description="Upper bound on rendered time series points"
    )

    # Table
    page_size: int = Field(default=10, description="Rows per table page")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Dashboard Derivation Engine"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # File Upload
    max_file_size_mb: int = Field(
        default=500,
        description="Maximum file size in MB"
    )

    # Session
    session_ttl_hours: int = Field(
        default=24,
        description="Session time-to-live in hours"
    )

    # Logging
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_level: str = Field(default="DEBUG", description="Minimum log level")

    # Nested settings
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
