"""AppSettings -- Ploi panel configuration.

All environment variables are read via pydantic-settings.
PLOI_API_KEY is required and will cause a startup failure if missing.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Ploi panel settings, loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Ploi API - key is required, application fails to start if missing
    PLOI_API_KEY: str
    PLOI_API_URL: str = "https://ploi.io/api"
    PLOI_API_TIMEOUT_SECONDS: int = 30

    # Links rendered in the server detail view
    PLOI_PANEL_URL: str = "https://ploi.io/panel"
    PLOI_SSH_USER: str = "ploi"

    # Local list cache
    CACHE_DB_URL: str = "sqlite+aiosqlite:///./ploi-cache.db"

    # Notifications kept for GET /notifications
    NOTIFICATION_HISTORY: int = 50

    LOG_LEVEL: str = "INFO"


settings = AppSettings()
