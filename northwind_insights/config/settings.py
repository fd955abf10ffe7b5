"""
Northwind Sales Insights
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataSourceSettings(BaseSettings):
    """Dataset Source Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    source_dir: str = Field(default="./data/northwind", description="Directory holding one file per table")
    file_format: str = Field(default="csv", description="Table file format: csv, parquet or jsonl")
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL of a Northwind database (overrides source_dir)",
    )

    @field_validator("file_format")
    @classmethod
    def validate_file_format(cls, v: str) -> str:
        """Validate table file format"""
        allowed = ["csv", "parquet", "jsonl"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Report Parameter Defaults"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    top_customers_limit: int = Field(default=5, ge=1, description="Rows in the top customers report")
    top_employees_limit: int = Field(default=3, ge=1, description="Rows in the top employees report")
    top_month_products_limit: int = Field(default=3, ge=1, description="Products listed for the best month")
    top_countries_limit: int = Field(default=3, ge=1, description="Rows in the top countries report")
    supplier_share_threshold: float = Field(
        default=10.0,
        ge=0,
        le=100,
        description="Minimum revenue share (percent, exclusive) for a supplier to be listed",
    )
    repeat_customer_min_orders: int = Field(
        default=5,
        ge=0,
        description="Customers need strictly more orders than this to be listed",
    )

    # Output
    output_format: str = Field(default="table", description="Output format: table, csv or json")
    output_dir: Optional[str] = Field(default=None, description="Write reports here instead of stdout")

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format"""
        allowed = ["table", "csv", "json"]
        if v.lower() not in allowed:
            raise ValueError(f"Output format must be one of: {allowed}")
        return v.lower()


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="northwind-insights", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    data_source: DataSourceSettings = Field(default_factory=DataSourceSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
