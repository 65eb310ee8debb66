"""
Restaurant Reservation Analytics
Centralized Configuration Management

Pydantic settings with environment variable support, validation and type
safety. Settings are read at the workflow edge only; pipeline stages receive
every parameter explicitly.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataSourceSettings(BaseSettings):
    """Source Table Locations"""

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    visits_path: str = Field(default="./data/raw/restaurants_visitors.csv", description="Visit/reservation records file")
    calendar_path: str = Field(default="./data/raw/date_info.csv", description="Calendar dimension file")
    stores_path: str = Field(default="./data/raw/store_info.csv", description="Store dimension file")
    file_format: str = Field(default="csv", description="Source file format: csv, jsonl or parquet")
    delimiter: str = Field(default=",", description="CSV delimiter")
    datetime_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Timestamp format in source files")

    @field_validator("file_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate source format"""
        allowed = ["csv", "jsonl", "parquet"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Reporting View Parameters"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    output_path: str = Field(default="./data/reports", description="Directory for rendered views")
    output_format: str = Field(default="parquet", description="Output format: parquet or csv")
    top_n: int = Field(default=5, ge=1, description="Last rank kept in top-N rankings")
    year: Optional[int] = Field(default=2017, description="ISO year reported by week-over-week views")
    min_week: Optional[int] = Field(default=19, ge=1, le=53, description="First ISO week kept in week-over-week views")

    @field_validator("output_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate output format"""
        allowed = ["parquet", "csv"]
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
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="restaurant-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    sources: DataSourceSettings = Field(default_factory=DataSourceSettings)
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
