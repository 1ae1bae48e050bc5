"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from app.schemas.base import CamelModel, NormalizedEmail, Password, PersonName


class RegisterRequest(CamelModel):
    name: PersonName
    email: NormalizedEmail
    password: Password


class LoginRequest(CamelModel):
    email: NormalizedEmail
    password: Password


class ForgotPasswordRequest(CamelModel):
    email: NormalizedEmail


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: Password


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: str
    is_email_verified: bool
    preferred_currency: str
    created_at: datetime
    updated_at: datetime


class LoginResponse(UserResponse):
    token: str
    last_login_at: datetime | None = None
    login_attempts: int
    lock_until: datetime | None = None


class MessageResponse(CamelModel):
    message: str


class SessionResponse(CamelModel):
    id: int
    ip_address: str
    user_agent: str
    created_at: datetime
    expires_at: datetime
