"""Opaque token helpers and expired-token purge."""

import hashlib
import logging
import secrets
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.models.password_reset_token import PasswordResetToken
from app.models.refresh_token import RefreshToken

logger = logging.getLogger("finance_tracker")

RANDOM_TOKEN_BYTES = 64


def generate_random_token() -> str:
    """Return a cryptographically random token, hex encoded."""
    return secrets.token_hex(RANDOM_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a raw token. Only this value is ever persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def purge_expired_tokens(db: Session, now: datetime | None = None) -> int:
    """Delete expired refresh and reset tokens. Returns number of rows removed."""
    now = now or datetime.utcnow()
    removed = 0
    for model in (RefreshToken, PasswordResetToken):
        result = db.execute(delete(model).where(model.expires_at <= now))
        removed += result.rowcount or 0
    db.commit()
    if removed:
        logger.info("Purged %d expired token(s)", removed)
    return removed
