"""Refresh token model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.database import Base

IP_ADDRESS_MAX_LENGTH = 64
USER_AGENT_MAX_LENGTH = 512


class RefreshToken(Base):
    """One issued session. Only the SHA-256 hash of the opaque token is stored."""

    __tablename__ = "refresh_token"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    ip_address = Column(String(IP_ADDRESS_MAX_LENGTH), nullable=False)
    user_agent = Column(String(USER_AGENT_MAX_LENGTH), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
