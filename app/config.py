from datetime import date
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Certification store (PostgreSQL). Only required once the pool is initialized.
    DATABASE_URL: str | None = None

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    # =================================================================
    # WEEKLY AGGREGATION SETTINGS
    # =================================================================
    AGGREGATION_TIMEZONE: str = "Asia/Seoul"
    AGGREGATION_GROUP_SIZE: int = 10
    AGGREGATION_INTER_GROUP_DELAY_MS: int = 100
    AGGREGATION_MINIMUM_RECORD_COUNT: int = 3
    AGGREGATION_MINIMUM_DISTINCT_DAYS: int = 3
    AGGREGATION_MAX_CONTENT_LENGTH: int = 500

    # Explicit window for one-off reruns; both must be set to take effect
    AGGREGATION_WEEK_START: date | None = None
    AGGREGATION_WEEK_END: date | None = None

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            # Batch runs are read-only and short; keep local pools small
            config.update(
                {
                    "min_size": 1,
                    "max_size": 4,
                    "timeout": 15.0,
                }
            )

        return config

    def configured_week(self) -> tuple[date, date] | None:
        """Return the explicitly configured aggregation window, if any."""
        if self.AGGREGATION_WEEK_START and self.AGGREGATION_WEEK_END:
            return self.AGGREGATION_WEEK_START, self.AGGREGATION_WEEK_END
        return None


settings = Settings()
