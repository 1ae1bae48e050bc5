"""Pydantic schemas for user management endpoints."""

from app.schemas.base import CamelModel, CurrencyCode, NormalizedEmail, PersonName


class UpdateUserRequest(CamelModel):
    name: PersonName | None = None
    email: NormalizedEmail | None = None
    preferred_currency: CurrencyCode | None = None
