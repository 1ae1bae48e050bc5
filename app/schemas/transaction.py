"""Pydantic schemas for transaction endpoints."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from app.schemas.base import CamelModel, CurrencyCode, UtcDateTime
from app.schemas.trans_category import TransCategoryResponse

TransactionType = Literal["income", "expense"]
Description = Annotated[str, StringConstraints(max_length=128)]
Amount = Annotated[float, Field(gt=0)]


class CreateTransactionRequest(CamelModel):
    trans_category_id: int
    amount: Amount
    currency: CurrencyCode | None = None
    type: TransactionType
    description: Description | None = None
    date: UtcDateTime | None = None


class UpdateTransactionRequest(CamelModel):
    trans_category_id: int | None = None
    amount: Amount | None = None
    currency: CurrencyCode | None = None
    type: TransactionType | None = None
    description: Description | None = None
    date: UtcDateTime | None = None


class TransactionResponse(CamelModel):
    id: int
    trans_category: TransCategoryResponse
    amount: float
    currency: str
    type: str
    description: str | None
    date: datetime
    updated_at: datetime


class TransactionSummaryResponse(CamelModel):
    total_income: float
    total_expenses: float
    current_balance: float
    currency: str


class YearMonthResponse(CamelModel):
    year: int
    month: int


class CategorySummaryResponse(CamelModel):
    trans_category_name: str
    type: str
    total_amount: float
    count: int


class MonthlyCategoryItem(CamelModel):
    category_name: str
    type: str
    total_amount: float
    count: int


class MonthlyCategorySummaryResponse(CamelModel):
    month: str
    transactions: list[MonthlyCategoryItem]
