"""Record store abstraction over users, costs and stored monthly reports."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .errors import EntityConflictError

LOG = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Create/find/delete operations per record kind, injected into every request."""

    def add_user(self, user: models.User) -> models.User: ...

    def find_user(self, user_id: str) -> Optional[models.User]: ...

    def add_cost(self, cost: models.Cost) -> models.Cost: ...

    def find_costs(self, user_id: str, start: datetime, end: datetime) -> List[models.Cost]: ...

    def total_cost(self, user_id: str) -> float: ...

    def find_report(self, user_id: str, year: int, month: int) -> Optional[models.Report]: ...

    def replace_report(self, user_id: str, year: int, month: int, data: list) -> models.Report: ...

    def delete_report(self, user_id: str, year: int, month: int) -> int: ...


class SqlRecordStore:
    """:class:`RecordStore` backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add_user(self, user: models.User) -> models.User:
        try:
            with self._session.begin_nested():
                self._session.add(user)
                self._session.flush()
        except IntegrityError as exc:
            raise EntityConflictError(f"User {user.id} already exists") from exc
        self._session.refresh(user)
        return user

    def find_user(self, user_id: str) -> Optional[models.User]:
        stmt = select(models.User).where(models.User.id == user_id)
        return self._session.scalars(stmt).first()

    def add_cost(self, cost: models.Cost) -> models.Cost:
        self._session.add(cost)
        self._session.flush()
        self._session.refresh(cost)
        return cost

    def find_costs(self, user_id: str, start: datetime, end: datetime) -> List[models.Cost]:
        stmt = (
            select(models.Cost)
            .where(models.Cost.userid == user_id, models.Cost.date >= start, models.Cost.date <= end)
            .order_by(models.Cost.date, models.Cost.id)
        )
        return list(self._session.scalars(stmt))

    def total_cost(self, user_id: str) -> float:
        stmt = select(func.coalesce(func.sum(models.Cost.sum), 0)).where(models.Cost.userid == user_id)
        return float(self._session.scalar(stmt) or 0)

    def find_report(self, user_id: str, year: int, month: int) -> Optional[models.Report]:
        stmt = select(models.Report).where(
            models.Report.userid == user_id,
            models.Report.year == year,
            models.Report.month == month,
        )
        return self._session.scalars(stmt).first()

    def replace_report(self, user_id: str, year: int, month: int, data: list) -> models.Report:
        """Swap the stored report for ``(user_id, year, month)`` in one savepoint.

        The unique constraint on the key turns a concurrent insert into an
        ``IntegrityError``; the savepoint is then discarded and the row that
        won is returned.
        """
        try:
            with self._session.begin_nested():
                self._session.execute(
                    delete(models.Report)
                    .where(
                        models.Report.userid == user_id,
                        models.Report.year == year,
                        models.Report.month == month,
                    )
                    .execution_options(synchronize_session="fetch")
                )
                report = models.Report(userid=user_id, year=year, month=month, data=data)
                self._session.add(report)
                self._session.flush()
        except IntegrityError:
            LOG.warning("Concurrent report write for %s %04d-%02d, keeping stored row", user_id, year, month)
            winner = self.find_report(user_id, year, month)
            if winner is None:
                raise
            return winner
        self._session.refresh(report)
        return report

    def delete_report(self, user_id: str, year: int, month: int) -> int:
        result = self._session.execute(
            delete(models.Report)
            .where(
                models.Report.userid == user_id,
                models.Report.year == year,
                models.Report.month == month,
            )
            .execution_options(synchronize_session="fetch")
        )
        self._session.flush()
        return result.rowcount
