"""Transaction category API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.schemas.trans_category import (
    CreateTransCategoryRequest,
    TransCategoryResponse,
    UpdateTransCategoryRequest,
)
from app.services.trans_category import get_trans_category_service

router = APIRouter(prefix="/api/trans-categories", tags=["Transaction Categories"])


@router.post("/", response_model=TransCategoryResponse, status_code=201)
def create_category(
    body: CreateTransCategoryRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransCategoryResponse:
    """Create a custom category."""
    category = get_trans_category_service().create(
        db, user.user_id, user.role, body.name, body.description, body.type
    )
    return TransCategoryResponse.model_validate(category)


@router.get("/", response_model=list[TransCategoryResponse])
def list_categories(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TransCategoryResponse]:
    """List default categories and the caller's own."""
    categories = get_trans_category_service().list_all(db, user.user_id)
    return [TransCategoryResponse.model_validate(c) for c in categories]


@router.patch("/{category_id}", response_model=TransCategoryResponse)
def update_category(
    category_id: int,
    body: UpdateTransCategoryRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransCategoryResponse:
    """Rename or re-describe a custom category."""
    category = get_trans_category_service().update(
        db, category_id, user.user_id, user.role, body.model_dump(exclude_unset=True)
    )
    return TransCategoryResponse.model_validate(category)


@router.delete("/{category_id}", response_model=TransCategoryResponse)
def delete_category(
    category_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransCategoryResponse:
    """Delete an unused custom category."""
    category = get_trans_category_service().delete(db, category_id, user.user_id, user.role)
    return TransCategoryResponse.model_validate(category)
