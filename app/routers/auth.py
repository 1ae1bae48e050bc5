"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    REFRESH_COOKIE_NAME,
    CurrentUser,
    clear_refresh_cookie,
    client_context,
    get_current_user,
    set_refresh_cookie,
)
from app.rate_limit import limiter
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from app.services.auth import SessionTokens, get_auth_service

logger = logging.getLogger("finance_tracker")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "Password reset link sent to your registered email."


def _session_response(response: Response, tokens: SessionTokens) -> LoginResponse:
    set_refresh_cookie(response, tokens.refresh_token)
    user = UserResponse.model_validate(tokens.user)
    return LoginResponse(
        **user.model_dump(),
        token=tokens.access_token,
        last_login_at=tokens.user.last_login_at,
        login_attempts=tokens.user.login_attempts,
        lock_until=tokens.user.lock_until,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> UserResponse:
    """Register a new user account."""
    user = get_auth_service().register(db, body.name, body.email, body.password)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate, return an access token and set the refresh token cookie."""
    user_agent, ip_address = client_context(request)
    tokens = get_auth_service().login(db, body.email, body.password, user_agent, ip_address)
    return _session_response(response, tokens)


@router.post("/refresh-token", response_model=LoginResponse)
@limiter.limit("30/minute")
def refresh_token(request: Request, response: Response, db: Session = Depends(get_db)) -> LoginResponse:
    """Rotate the refresh token from the cookie and issue a new access token."""
    user_agent, ip_address = client_context(request)
    tokens = get_auth_service().refresh_token(
        db, request.cookies.get(REFRESH_COOKIE_NAME), user_agent, ip_address
    )
    return _session_response(response, tokens)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Email a password reset link. Responds identically for unknown addresses."""
    get_auth_service().forgot_password(db, body.email, background_tasks)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit("5/minute")
def reset_password(request: Request, body: ResetPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """Set a new password using a reset token."""
    get_auth_service().reset_password(db, body.token, body.new_password)
    return MessageResponse(message="Password reset successful")


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)) -> MessageResponse:
    """Revoke the refresh token and clear its cookie."""
    get_auth_service().logout(db, request.cookies.get(REFRESH_COOKIE_NAME))
    clear_refresh_cookie(response)
    return MessageResponse(message="Successfully logged out")


@router.get("/sessions", response_model=list[SessionResponse])
def list_sessions(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SessionResponse]:
    """List the caller's active sessions."""
    sessions = get_auth_service().list_sessions(db, user.user_id)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
def revoke_session(
    session_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Revoke one of the caller's sessions."""
    get_auth_service().revoke_session(db, user.user_id, session_id)
    return MessageResponse(message="Session revoked")
