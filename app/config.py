from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./skillforge.db"

    # Bearer token verification
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Optional[str] = None

    # Credit economy
    INITIAL_TIME_CREDITS: int = 5

    # Matching
    MAX_BROWSE_LIMIT: int = 50
    DEFAULT_BROWSE_LIMIT: int = 20

    # In-app notifications
    NOTIFICATIONS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
