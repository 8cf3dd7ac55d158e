# FILE: activity_bridge/config.py
"""
Configuration management for the activity bridge
Loads from environment variables with validation
"""
import os
from typing import List, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    # Authoring service
    service_host: str = Field(default="0.0.0.0", alias="SERVICE_HOST")
    service_port: int = Field(default=8000, alias="SERVICE_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Data paths
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")

    # Telemetry
    telemetry_enabled: bool = Field(default=True, alias="TELEMETRY_ENABLED")
    telemetry_persist: bool = Field(
        default=True,
        alias="TELEMETRY_PERSIST",
        description="Append telemetry events to rotated JSONL files under LOGS_DIR/telemetry. "
                    "When False only the in-memory tail is kept."
    )
    telemetry_timezone: str = Field(default="UTC", alias="TELEMETRY_TIMEZONE")
    telemetry_retention_days: int = Field(default=90, alias="TELEMETRY_RETENTION_DAYS")

    # Delivery
    preview_mode: bool = Field(default=False, alias="PREVIEW_MODE")
    default_user_id: int = Field(default=1, alias="DEFAULT_USER_ID")
    continuation_timeout_seconds: float = Field(
        default=10.0,
        alias="CONTINUATION_TIMEOUT_SECONDS",
        description="How long a caller of EventBus.request waits for a continuation to be settled. "
                    "Events nobody is addressed by are never answered."
    )

    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:8501"], alias="CORS_ORIGINS")

    # Validators
    @validator("environment")
    def validate_environment(cls, v):
        if v not in ["development", "test", "production"]:
            raise ValueError("environment must be 'development', 'test', or 'production'")
        return v

    @validator("telemetry_retention_days")
    def validate_telemetry_retention_days(cls, v):
        if v < 1:
            raise ValueError("telemetry_retention_days must be at least 1")
        return v

    @validator("continuation_timeout_seconds")
    def validate_continuation_timeout(cls, v):
        if v <= 0:
            raise ValueError("continuation_timeout_seconds must be positive")
        if v > 300:
            raise ValueError("continuation_timeout_seconds should not exceed 300 seconds")
        return v

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.telemetry_enabled and self.telemetry_persist:
            os.makedirs(self.logs_dir, exist_ok=True)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings (useful for testing)"""
    global _settings
    _settings = None
    return get_settings()
