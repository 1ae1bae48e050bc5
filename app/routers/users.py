"""User management API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user_record, require_admin, require_self_or_admin
from app.models.user import User
from app.schemas.auth import UserResponse
from app.schemas.base import NormalizedEmail
from app.schemas.user import UpdateUserRequest
from app.services.user import get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user_record)) -> UserResponse:
    """Get the caller's profile."""
    return UserResponse.model_validate(user)


@router.get("/all", response_model=list[UserResponse])
def list_users(admin: CurrentUser = Depends(require_admin), db: Session = Depends(get_db)) -> list[UserResponse]:
    """List every user (admin only)."""
    return [UserResponse.model_validate(u) for u in get_user_service().get_all_users(db)]


@router.get("/email", response_model=UserResponse)
def get_user_by_email(
    email: NormalizedEmail = Query(...),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Look up a user by email (admin only)."""
    return UserResponse.model_validate(get_user_service().get_user_by_email(db, email))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    caller: CurrentUser = Depends(require_self_or_admin),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Get a user by id (self or admin)."""
    return UserResponse.model_validate(get_user_service().get_user_by_id(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    caller: CurrentUser = Depends(require_self_or_admin),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Update name, email or preferred currency (self or admin)."""
    user = get_user_service().update_user(db, user_id, body.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)
