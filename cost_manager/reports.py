"""Monthly report aggregation and the stored-report reuse policy.

A report groups one user's cost entries for a calendar month into five
category buckets, always in the order of :data:`CATEGORIES` and always all
five of them, even when a bucket is empty. The computed payload is stored and
reused for as long as a fresh computation serialises to the same JSON text;
any difference replaces the stored document.
"""
from __future__ import annotations

import calendar
import json
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Dict, Final, List, Tuple

from . import models
from .errors import NoReportDataError
from .store import RecordStore

LOG = logging.getLogger(__name__)

CATEGORIES: Final[Tuple[str, ...]] = tuple(category.value for category in models.Category)

ReportPayload = List[Dict[str, List[Dict[str, object]]]]

__all__ = [
    "CATEGORIES",
    "ReportPayload",
    "build_report",
    "month_bounds",
    "payloads_match",
    "resolve_monthly_report",
    "serialize_payload",
]


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return the first and last instant (millisecond precision) of a calendar month."""

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, 0, 0, 0, 0)
    end = datetime(year, month, last_day, 23, 59, 59, 999000)
    return start, end


def build_report(
    costs: Iterable[models.Cost],
    categories: Sequence[str] = CATEGORIES,
) -> ReportPayload:
    """Group ``costs`` into one ``{category: [items]}`` bucket per category.

    Items are ``{"sum", "description", "day"}`` mappings kept in input order.
    Costs whose category is not listed in ``categories`` are left out.
    """

    buckets: Dict[str, List[Dict[str, object]]] = {category: [] for category in categories}
    for cost in costs:
        bucket = buckets.get(cost.category)
        if bucket is None:
            LOG.debug("Skipping cost %s with unknown category %r", cost.id, cost.category)
            continue
        bucket.append({"sum": float(cost.sum), "description": cost.description, "day": cost.date.day})
    return [{category: buckets[category]} for category in categories]


def serialize_payload(payload: ReportPayload) -> str:
    """Canonical JSON text of a payload; key and item order are preserved."""

    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def payloads_match(stored: ReportPayload, candidate: ReportPayload) -> bool:
    return serialize_payload(stored) == serialize_payload(candidate)


def resolve_monthly_report(store: RecordStore, user_id: str, year: int, month: int) -> models.Report:
    """Return the up-to-date stored report for ``(user_id, year, month)``.

    Raises:
        NoReportDataError: If the user has no cost entries in that month. No
            stored report is created or altered in that case.
    """

    start, end = month_bounds(year, month)
    stored = store.find_report(user_id, year, month)
    costs = store.find_costs(user_id, start, end)
    if not costs:
        raise NoReportDataError(f"No data found for user {user_id} in {year:04d}-{month:02d}")

    candidate = build_report(costs)
    if stored is not None and payloads_match(stored.data, candidate):
        LOG.info("Reusing stored report for user %s %04d-%02d", user_id, year, month)
        return stored

    if stored is None:
        LOG.info("Creating report for user %s %04d-%02d from %d costs", user_id, year, month, len(costs))
    else:
        LOG.info("Stored report for user %s %04d-%02d is stale, replacing it", user_id, year, month)
    return store.replace_report(user_id, year, month, candidate)
