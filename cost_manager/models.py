"""SQLAlchemy models for the cost manager service."""
from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, UniqueConstraint

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in ``DateTime`` columns."""
    return datetime.now(tz=UTC).replace(tzinfo=None)


class MaritalStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class Category(str, Enum):
    FOOD = "food"
    EDUCATION = "education"
    HEALTH = "health"
    HOUSING = "housing"
    SPORT = "sport"


class User(Base):
    __tablename__ = "users"

    pk: int = Column(Integer, primary_key=True)
    id: str = Column(String(64), unique=True, nullable=False, index=True)
    first_name: str = Column(String(100), nullable=False)
    last_name: str = Column(String(100), nullable=False)
    birthday: date = Column(Date, nullable=False)
    marital_status: str = Column(String(16), nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=utcnow)


class Cost(Base):
    __tablename__ = "costs"

    id: int = Column(Integer, primary_key=True, index=True)
    description: str = Column(String(255), nullable=False)
    category: str = Column(String(32), nullable=False)
    userid: str = Column(String(64), nullable=False, index=True)
    sum: float = Column(Float, nullable=False)
    date: datetime = Column(DateTime, nullable=False, default=utcnow)


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("userid", "year", "month", name="uq_reports_user_period"),
        {"sqlite_autoincrement": True},
    )

    id: int = Column(Integer, primary_key=True, index=True)
    userid: str = Column(String(64), nullable=False, index=True)
    year: int = Column(Integer, nullable=False)
    month: int = Column(Integer, nullable=False)
    data: list = Column(JSON, nullable=False)
    created_at: datetime = Column(DateTime, nullable=False, default=utcnow)
