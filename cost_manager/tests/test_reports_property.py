from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from hypothesis import given
from hypothesis import strategies as st

from cost_manager import models
from cost_manager.reports import CATEGORIES, build_report, month_bounds, serialize_payload

COSTS_STRATEGY = st.lists(
    st.builds(
        lambda category, amount, day, description: models.Cost(
            description=description,
            category=category,
            userid="u1",
            sum=amount,
            date=datetime(2024, 2, day, 12, 0),
        ),
        category=st.sampled_from(CATEGORIES + ("misc",)),
        amount=st.floats(min_value=0.01, max_value=1e6, allow_nan=False, allow_infinity=False),
        day=st.integers(min_value=1, max_value=29),
        description=st.text(max_size=20),
    ),
    max_size=30,
)


@given(costs=COSTS_STRATEGY)
def test_build_report_shape_and_determinism(costs: list[models.Cost]) -> None:
    payload = build_report(costs)

    assert [next(iter(bucket)) for bucket in payload] == list(CATEGORIES)
    assert serialize_payload(payload) == serialize_payload(build_report(list(costs)))
    grouped = sum(len(items) for bucket in payload for items in bucket.values())
    assert grouped == sum(1 for cost in costs if cost.category in CATEGORIES)


@given(year=st.integers(min_value=1900, max_value=2200), month=st.integers(min_value=1, max_value=12))
def test_month_bounds_cover_exactly_one_month(year: int, month: int) -> None:
    start, end = month_bounds(year, month)

    assert start.day == 1 and (start.hour, start.minute, start.second) == (0, 0, 0)
    assert end.day == calendar.monthrange(year, month)[1]
    assert (end + timedelta(milliseconds=1)).month != month
    assert (start - timedelta(milliseconds=1)).month != month
