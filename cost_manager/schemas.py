"""Pydantic schemas for serialising cost manager data."""
from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Category, MaritalStatus


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserBase(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    birthday: date
    marital_status: MaritalStatus


class UserCreate(UserBase):
    pass


class UserRead(UserBase, ORMModel):
    created_at: datetime


class UserSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    age: int
    total_cost: float


class CostBase(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    category: Category
    userid: str = Field(..., min_length=1, max_length=64)
    sum: float = Field(..., gt=0, allow_inf_nan=False)


class CostCreate(CostBase):
    date: Optional[datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def accept_plain_dates(cls, value: object) -> object:
        if isinstance(value, str) and len(value) == 10:
            return datetime.combine(date.fromisoformat(value), datetime.min.time())
        return value

    @field_validator("date")
    @classmethod
    def store_as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value


class CostRead(CostBase, ORMModel):
    id: int
    date: datetime


class ReportItem(BaseModel):
    sum: float
    description: str
    day: int


class ReportRead(BaseModel):
    userid: str
    year: int
    month: int
    costs: List[Dict[str, List[ReportItem]]]


class TeamMember(BaseModel):
    first_name: str
    last_name: str


class ErrorRead(BaseModel):
    error: str
