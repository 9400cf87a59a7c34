from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./family_finance.db"
    app_env: str = "dev"
    app_cors_origins: str = "*"
    log_level: str = "INFO"
    # Base currency for new accounts when the client does not pick one
    default_currency: str = "USD"
    # Dashboard shows this many active budgets before "View N more"
    summary_top_n: int = 3
    # Insights overview shows the top N budgets by usage unless show_all is set
    overview_top_n: int = 5
    # Clients auto-dismiss toasts after this many seconds
    notification_ttl_seconds: int = 5
    # Notifications kept in memory before the oldest are dropped
    notification_max_items: int = 50
    slack_webhook_url: str | None = None


settings = Settings()
