"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "CampusHub"
    APP_URL: str = "http://localhost:8000"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./campushub.db"

    # JWT
    JWT_SECRET_KEY: str = "temp-jwt-secret-change-later"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 168  # 7 days

    # Email
    SMTP_HOST: str = "smtp-relay.brevo.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "noreply@campushub.app"
    EMAIL_TIMEOUT_SECONDS: float = 12.0

    # One-time verification codes
    OTP_TTL_SECONDS: int = 600
    OTP_RESEND_INTERVAL_SECONDS: int = 60
    OTP_SWEEP_INTERVAL_SECONDS: int = 600

    # Event check-in codes
    CHECKIN_CODE_TTL_HOURS: int = 24

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
