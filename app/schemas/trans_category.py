"""Pydantic schemas for transaction category endpoints."""

from typing import Annotated, Literal

from pydantic import StringConstraints

from app.schemas.base import CamelModel

CategoryName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=64, pattern=r"^[A-Za-z ]+$")
]
CategoryDescription = Annotated[str, StringConstraints(max_length=128)]


class CreateTransCategoryRequest(CamelModel):
    name: CategoryName
    description: CategoryDescription | None = None
    type: Literal["default", "custom"] = "custom"


class UpdateTransCategoryRequest(CamelModel):
    name: CategoryName | None = None
    description: CategoryDescription | None = None


class TransCategoryResponse(CamelModel):
    id: int
    name: str
    description: str | None
    type: str
