"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Ledger API
    ledger_api_base: str = "https://api.ynab.com/v1"
    ledger_access_token: str = ""
    default_budget_id: str = "last-used"

    # Service
    service_name: str = "ledger-insights"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    ledger_max_retries: int = 3
    ledger_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Analysis defaults
    recurring_lookback_months: int = 6
    recurring_min_occurrences: int = 3
    forecast_days: int = 30
    trend_months: int = 6


settings = Settings()
