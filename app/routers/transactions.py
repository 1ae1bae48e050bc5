"""Transaction API endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user, get_current_user_record
from app.models.user import User
from app.schemas.base import UtcDateTime
from app.schemas.transaction import (
    CategorySummaryResponse,
    CreateTransactionRequest,
    MonthlyCategorySummaryResponse,
    TransactionResponse,
    TransactionSummaryResponse,
    UpdateTransactionRequest,
    YearMonthResponse,
)
from app.services.transaction import get_transaction_service

router = APIRouter(prefix="/api/trans", tags=["Transactions"])

TimeUnit = Literal["hour", "day", "week", "month", "year", "fy"]


@router.post("/", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: CreateTransactionRequest,
    user: User = Depends(get_current_user_record),
    db: Session = Depends(get_db),
) -> TransactionResponse:
    """Record an income or expense."""
    service = get_transaction_service()
    transaction = service.create(db, user.id, user.preferred_currency, body.model_dump())
    return TransactionResponse.model_validate(transaction)


@router.get("/all", response_model=list[TransactionResponse])
def list_transactions(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """List all of the caller's transactions, newest first."""
    return [TransactionResponse.model_validate(t) for t in get_transaction_service().list_all(db, user.user_id)]


@router.get("/list-by-date-range", response_model=list[TransactionResponse])
def list_by_date_range(
    start_date: UtcDateTime | None = Query(None, alias="startDate"),
    end_date: UtcDateTime | None = Query(None, alias="endDate"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """List transactions between two ISO timestamps."""
    items = get_transaction_service().list_by_date_range(db, user.user_id, start_date, end_date)
    return [TransactionResponse.model_validate(t) for t in items]


@router.get("/list-by-time-unit", response_model=list[TransactionResponse])
def list_by_time_unit(
    time_unit: TimeUnit = Query(..., alias="timeUnit"),
    units: int = Query(..., ge=0),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """List transactions from the last N hours/days/weeks/months/years/fiscal years."""
    items = get_transaction_service().list_by_last_n_units(db, user.user_id, time_unit, units)
    return [TransactionResponse.model_validate(t) for t in items]


@router.get("/summary", response_model=TransactionSummaryResponse)
def get_summary(
    start_date: UtcDateTime | None = Query(None, alias="startDate"),
    end_date: UtcDateTime | None = Query(None, alias="endDate"),
    user: User = Depends(get_current_user_record),
    db: Session = Depends(get_db),
) -> TransactionSummaryResponse:
    """Income, expenses and balance for the caller."""
    summary = get_transaction_service().get_summary(db, user.id, user.preferred_currency, start_date, end_date)
    return TransactionSummaryResponse(**summary)


@router.get("/year-month-list", response_model=list[YearMonthResponse])
def get_year_month_list(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[YearMonthResponse]:
    """Months that contain at least one transaction."""
    return [YearMonthResponse(**item) for item in get_transaction_service().get_year_month_list(db, user.user_id)]


@router.get("/category-summary-date-range", response_model=list[CategorySummaryResponse])
def category_summary_by_date_range(
    start_date: UtcDateTime | None = Query(None, alias="startDate"),
    end_date: UtcDateTime | None = Query(None, alias="endDate"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[CategorySummaryResponse]:
    """Totals per category between two timestamps."""
    rows = get_transaction_service().get_category_summary_by_date_range(db, user.user_id, start_date, end_date)
    return [CategorySummaryResponse(**row) for row in rows]


@router.get("/category-summary-last-n-units", response_model=list[CategorySummaryResponse])
def category_summary_by_last_n_units(
    time_unit: TimeUnit = Query(..., alias="timeUnit"),
    units: int = Query(..., ge=0),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[CategorySummaryResponse]:
    """Totals per category for the last N time units."""
    rows = get_transaction_service().get_category_summary_by_last_n_units(db, user.user_id, time_unit, units)
    return [CategorySummaryResponse(**row) for row in rows]


@router.get("/monthly-category-summary", response_model=list[MonthlyCategorySummaryResponse])
def monthly_category_summary(
    months: int = Query(..., ge=0),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[MonthlyCategorySummaryResponse]:
    """Category totals grouped by month for the last N months."""
    rows = get_transaction_service().get_monthly_category_summary(db, user.user_id, months)
    return [MonthlyCategorySummaryResponse(**row) for row in rows]


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    body: UpdateTransactionRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransactionResponse:
    """Update one of the caller's transactions."""
    changes = body.model_dump(exclude_unset=True)
    transaction = get_transaction_service().update(db, transaction_id, user.user_id, changes)
    return TransactionResponse.model_validate(transaction)


@router.delete("/{transaction_id}", response_model=TransactionResponse)
def delete_transaction(
    transaction_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransactionResponse:
    """Delete one of the caller's transactions."""
    transaction = get_transaction_service().delete(db, transaction_id, user.user_id)
    return TransactionResponse.model_validate(transaction)
