"""Request-level operations for the cost manager service."""
from __future__ import annotations

from datetime import date
from typing import Optional

from . import models, schemas
from .errors import EntityConflictError, EntityNotFoundError, NoReportDataError
from .reports import resolve_monthly_report
from .store import RecordStore

__all__ = [
    "EntityConflictError",
    "EntityNotFoundError",
    "NoReportDataError",
    "create_cost",
    "create_user",
    "get_monthly_report",
    "get_user",
    "get_user_summary",
    "user_age",
]


def user_age(user: models.User, today: Optional[date] = None) -> int:
    """Year difference between ``today`` and the birthday, ignoring month and day."""
    today = today or date.today()
    return today.year - user.birthday.year


def create_user(store: RecordStore, user_in: schemas.UserCreate) -> models.User:
    data = user_in.model_dump()
    data["marital_status"] = user_in.marital_status.value
    return store.add_user(models.User(**data))


def get_user(store: RecordStore, user_id: str) -> models.User:
    user = store.find_user(user_id)
    if user is None:
        raise EntityNotFoundError(f"User {user_id} not found")
    return user


def get_user_summary(store: RecordStore, user_id: str) -> schemas.UserSummary:
    user = get_user(store, user_id)
    return schemas.UserSummary(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        age=user_age(user),
        total_cost=store.total_cost(user_id),
    )


def create_cost(store: RecordStore, cost_in: schemas.CostCreate) -> models.Cost:
    get_user(store, cost_in.userid)
    data = cost_in.model_dump(exclude_none=True)
    data["category"] = cost_in.category.value
    return store.add_cost(models.Cost(**data))


def get_monthly_report(store: RecordStore, user_id: str, year: int, month: int) -> schemas.ReportRead:
    report = resolve_monthly_report(store, user_id, year, month)
    return schemas.ReportRead(userid=report.userid, year=report.year, month=report.month, costs=report.data)
