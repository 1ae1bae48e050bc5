"""Authentication and session lifecycle.

Covers registration, login with lockout, refresh-token rotation, logout and
the password reset flow. Raw refresh and reset tokens only ever leave this
module in the return value of a login/refresh or inside a reset email; the
database stores their SHA-256 hashes.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from fastapi import BackgroundTasks
from sqlalchemy import case, delete, update
from sqlalchemy.orm import Session

from app.config import get_settings
from app.errors import ConflictError, NotFoundError, UnauthorizedError
from app.models.password_reset_token import PasswordResetToken
from app.models.refresh_token import IP_ADDRESS_MAX_LENGTH, USER_AGENT_MAX_LENGTH, RefreshToken
from app.models.user import User
from app.services.jwt import get_jwt_service
from app.services.mail import get_mail_service
from app.services.password import get_password_hasher
from app.services.tokens import generate_random_token, hash_token

logger = logging.getLogger("finance_tracker")

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
USER_NOT_FOUND = "User not found"


@dataclass
class SessionTokens:
    """Result of a successful login or refresh."""

    access_token: str
    refresh_token: str
    user: User


class ResetDispatch(Enum):
    """What forgot_password actually did. Never exposed to the caller."""

    SENT = "sent"
    SILENT_NOOP = "silent_noop"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Orchestrates the credential store, token store, hasher and signer."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.hasher = get_password_hasher()

    # --- Registration ---

    def register(self, db: Session, name: str, email: str, password: str) -> User:
        """Create a new account. Raises ConflictError if the email is taken."""
        email = normalize_email(email)
        if self._find_by_email(db, email):
            raise ConflictError("Email is already registered")

        user = User(
            name=name.strip(),
            email=email,
            password_hash=self.hasher.hash(password),
            role="user",
            is_email_verified=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    # --- Login / lockout ---

    def login(self, db: Session, email: str, password: str, user_agent: str, ip_address: str) -> SessionTokens:
        """Verify credentials and open a new session.

        The lock check runs before the password comparison so a locked
        account never reveals whether the submitted password was right.
        """
        now = datetime.utcnow()
        user = self._find_by_email(db, normalize_email(email))
        if not user:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if user.is_locked(now):
            remaining = math.ceil((user.lock_until - now).total_seconds() / 60)
            raise UnauthorizedError(f"Account is locked. Try again in {remaining} minute(s)")

        if not self.hasher.compare(password, user.password_hash):
            self._record_failed_attempt(db, user, now)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        db.execute(
            update(User)
            .where(User.id == user.id)
            .values(login_attempts=0, lock_until=None, last_login_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(user)

        return self._open_session(db, user, user_agent, ip_address, now)

    def _record_failed_attempt(self, db: Session, user: User, now: datetime) -> None:
        """Increment the attempt counter and lock once it reaches the threshold.

        Done as a single UPDATE so concurrent failures cannot under-count.
        """
        max_attempts = self.settings.MAX_LOGIN_ATTEMPTS
        lock_until = now + timedelta(minutes=self.settings.LOCK_DURATION_MINUTES)
        db.execute(
            update(User)
            .where(User.id == user.id)
            .values(
                login_attempts=User.login_attempts + 1,
                lock_until=case((User.login_attempts + 1 >= max_attempts, lock_until), else_=User.lock_until),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(user)

        if user.is_locked(now):
            logger.warning("Locked user %s after %d failed login attempts", user.id, user.login_attempts)

    # --- Refresh tokens ---

    def refresh_token(self, db: Session, raw_token: str | None, user_agent: str, ip_address: str) -> SessionTokens:
        """Exchange a refresh token for a new pair. Each refresh token works once."""
        if not raw_token:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        now = datetime.utcnow()
        token_hash = hash_token(raw_token)
        record = db.query(RefreshToken).filter(RefreshToken.token_hash == token_hash).first()
        if not record:
            logger.warning("Refresh attempted with unknown token from %s", ip_address)
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        user_id = record.user_id
        expired = record.expires_at <= now

        # Delete by exact hash; a concurrent replay of the same token sees rowcount 0.
        result = db.execute(delete(RefreshToken).where(RefreshToken.token_hash == token_hash))
        db.commit()
        if not result.rowcount or expired:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        user = db.get(User, user_id)
        if not user:
            raise UnauthorizedError(USER_NOT_FOUND)

        return self._open_session(db, user, user_agent, ip_address, now)

    def logout(self, db: Session, raw_token: str | None) -> None:
        """Revoke the session behind a refresh token.

        The access token is stateless and stays valid until it expires.
        """
        if not raw_token:
            raise UnauthorizedError("No refresh token provided")

        result = db.execute(delete(RefreshToken).where(RefreshToken.token_hash == hash_token(raw_token)))
        db.commit()
        if not result.rowcount:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

    def list_sessions(self, db: Session, user_id: int) -> list[RefreshToken]:
        """Live sessions for a user, newest first."""
        return (
            db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.expires_at > datetime.utcnow())
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc())
            .all()
        )

    def revoke_session(self, db: Session, user_id: int, session_id: int) -> None:
        """Revoke one of the user's sessions by id."""
        result = db.execute(
            delete(RefreshToken).where(RefreshToken.id == session_id, RefreshToken.user_id == user_id)
        )
        db.commit()
        if not result.rowcount:
            raise NotFoundError("Session not found")

    def _open_session(self, db: Session, user: User, user_agent: str, ip_address: str, now: datetime) -> SessionTokens:
        raw_refresh = generate_random_token()
        db.add(
            RefreshToken(
                user_id=user.id,
                token_hash=hash_token(raw_refresh),
                ip_address=(ip_address or "unknown")[:IP_ADDRESS_MAX_LENGTH],
                user_agent=(user_agent or "unknown")[:USER_AGENT_MAX_LENGTH],
                expires_at=now + timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
                created_at=now,
            )
        )
        db.commit()

        access_token = get_jwt_service().create_access_token(user.id, user.role)
        return SessionTokens(access_token=access_token, refresh_token=raw_refresh, user=user)

    # --- Password reset ---

    def forgot_password(self, db: Session, email: str, background_tasks: BackgroundTasks) -> None:
        """Start a password reset.

        Returns None whether or not the account exists, so callers cannot
        use this to probe for registered emails.
        """
        outcome = self._issue_reset(db, normalize_email(email), background_tasks)
        logger.info("Password reset requested (%s)", outcome.value)

    def _issue_reset(self, db: Session, email: str, background_tasks: BackgroundTasks) -> ResetDispatch:
        user = self._find_by_email(db, email)
        if not user:
            return ResetDispatch.SILENT_NOOP

        now = datetime.utcnow()
        raw_token = generate_random_token()
        db.add(
            PasswordResetToken(
                user_id=user.id,
                token_hash=hash_token(raw_token),
                expires_at=now + timedelta(minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES),
                created_at=now,
            )
        )
        db.commit()

        reset_url = f"{self.settings.FRONTEND_URL.rstrip('/')}/reset-password?token={raw_token}"
        background_tasks.add_task(get_mail_service().send_password_reset_email, user.email, user.name, reset_url)
        return ResetDispatch.SENT

    def reset_password(self, db: Session, raw_token: str, new_password: str) -> None:
        """Consume a reset token and set a new password.

        Expiry is checked explicitly; expired rows may still exist until purged.
        """
        record = db.query(PasswordResetToken).filter(PasswordResetToken.token_hash == hash_token(raw_token)).first()
        if not record or record.expires_at <= datetime.utcnow():
            raise UnauthorizedError(INVALID_RESET_TOKEN)

        user = db.get(User, record.user_id)
        if not user:
            raise UnauthorizedError(USER_NOT_FOUND)

        user.password_hash = self.hasher.hash(new_password)
        db.delete(record)
        db.commit()
        logger.info("Password reset for user %s", user.id)

    def _find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).first()


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
