"""Authentication dependencies and refresh-token cookie helpers."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import ForbiddenError
from app.models.user import User
from app.services.jwt import get_jwt_service

REFRESH_COOKIE_NAME = "refreshToken"
REFRESH_COOKIE_PATH = "/api/auth"


@dataclass
class CurrentUser:
    """Authenticated caller, as asserted by the access token."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_user(request: Request) -> CurrentUser:
    """Validate the Bearer access token. Raises 401 if missing or invalid."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = auth_header[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    claims = get_jwt_service().verify_token(token)
    return CurrentUser(user_id=claims.user_id, role=claims.role)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only administrators."""
    if not user.is_admin:
        raise ForbiddenError("Administrator access required")
    return user


def require_self_or_admin(user_id: int, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow the account owner (path ``user_id``) or an administrator."""
    if user.user_id != user_id and not user.is_admin:
        raise ForbiddenError()
    return user


def get_current_user_record(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Load the caller's user row. 401 if the account no longer exists."""
    record = db.get(User, user.user_id)
    if not record:
        raise HTTPException(status_code=401, detail="User not found")
    return record


def client_context(request: Request) -> tuple[str, str]:
    """Return (user_agent, ip_address) for the calling client."""
    user_agent = request.headers.get("user-agent", "unknown")
    ip_address = request.client.host if request.client else "unknown"
    return user_agent, ip_address


def set_refresh_cookie(response: Response, token: str) -> None:
    """Set the refresh token cookie."""
    settings = get_settings()
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path=REFRESH_COOKIE_PATH,
    )


def clear_refresh_cookie(response: Response) -> None:
    """Clear the refresh token cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=REFRESH_COOKIE_NAME,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
