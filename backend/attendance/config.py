"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./attendance.db"
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Base URL of the check-in screen encoded into each event's QR payload
    PUBLIC_BASE_URL: str = "http://localhost:5173"

    # Usernames are mapped to <username>@AUTH_EMAIL_DOMAIN for the credential store
    AUTH_EMAIL_DOMAIN: str = "attendance.local"
    SESSION_TTL_HOURS: int = 24 * 7
    MIN_PASSWORD_LENGTH: int = 6

    # IANA timezone used for calendar-day boundaries
    TIMEZONE: str = "Asia/Seoul"

    class Config:
        env_file = ".env"


settings = Settings()
