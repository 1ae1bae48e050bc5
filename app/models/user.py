"""User model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.config import get_settings
from app.database import Base, TimestampMixin

USER_ROLES = ("user", "admin")


def _default_currency() -> str:
    return get_settings().DEFAULT_CURRENCY


class User(TimestampMixin, Base):
    """Registered account holder."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    role = Column(String(16), nullable=False, default="user")
    is_email_verified = Column(Boolean, nullable=False, default=False)
    last_login_at = Column(DateTime, nullable=True)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime, nullable=True)
    preferred_currency = Column(String(3), nullable=False, default=_default_currency)

    def is_locked(self, now: datetime) -> bool:
        """True while lock_until lies in the future."""
        return self.lock_until is not None and self.lock_until > now
