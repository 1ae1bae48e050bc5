"""Configuration settings for the Finance Tracker API."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./finance_tracker.db")

    # JWT
    JWT_ACCESS_SECRET: str = os.getenv("JWT_ACCESS_SECRET", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "finance-tracker-api")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "finance-tracker-client")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))

    # Sessions
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "60"))
    MAX_LOGIN_ATTEMPTS: int = int(os.getenv("MAX_LOGIN_ATTEMPTS", "3"))
    LOCK_DURATION_MINUTES: int = int(os.getenv("LOCK_DURATION_MINUTES", "10"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Users
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR").upper()

    # Mail
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "")

    # Application
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        if not self.JWT_ACCESS_SECRET:
            self.jwt_secret_generated = True
            self.JWT_ACCESS_SECRET = secrets.token_urlsafe(32)
        else:
            self.jwt_secret_generated = False

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if self.jwt_secret_generated:
            warnings.append("JWT_ACCESS_SECRET is not set - using auto-generated key (not persistent across restarts)")
        if not self.SMTP_HOST:
            warnings.append("SMTP_HOST is not set - password reset links will be logged instead of mailed")
        if self.is_production and self.FRONTEND_URL.startswith("http://"):
            warnings.append("FRONTEND_URL is not HTTPS in production")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
