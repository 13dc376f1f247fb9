"""Cohort service: weekly signup cohorts and period-over-period retention.

Users are grouped by the Sunday (UTC) that starts their signup week. For
each cohort, period i covers [start + i*period_days, start + (i+1)*period_days)
and retention is the share of cohort members with at least one interaction
in that window. Periods starting after `now` are reported as -1.
"""

import logging
from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping

from tripscope.services.forecasting import round_half_up
from tripscope.services.timestamps import resolve_now, start_of_day, to_utc, week_start

logger = logging.getLogger(__name__)

# Retention value for a period that has not started yet
FUTURE_PERIOD = -1


@dataclass
class CohortData:
    """Retention row for one signup cohort."""
    cohort: str                 # display label, e.g. "Mar 2"
    start_date: date            # Sunday the cohort week begins
    size: int
    retention: list[int] = field(default_factory=list)  # 0-100 per period, or -1 if future

    def to_dict(self) -> dict:
        return {
            "cohort": self.cohort,
            "start_date": self.start_date.isoformat(),
            "size": self.size,
            "retention": list(self.retention),
        }


def cohort_label(start: date) -> str:
    return f"{start:%b} {start.day}"


def _group_by_signup_week(users: Iterable[Mapping]) -> dict[date, set]:
    cohorts: dict[date, set] = defaultdict(set)
    for user in users:
        cohorts[week_start(to_utc(user["created_at"]))].add(user["id"])
    return cohorts


def _activity_index(interactions: Iterable[Mapping]) -> dict[object, list[datetime]]:
    """user_id -> sorted distinct interaction timestamps."""
    activity: dict[object, set[datetime]] = defaultdict(set)
    for interaction in interactions:
        activity[interaction["user_id"]].add(to_utc(interaction["created_at"]))
    return {user_id: sorted(stamps) for user_id, stamps in activity.items()}


def _active_in(stamps: list[datetime], start: datetime, end: datetime) -> bool:
    idx = bisect_left(stamps, start)
    return idx < len(stamps) and stamps[idx] < end


def build_cohorts(
    users: Iterable[Mapping],
    interactions: Iterable[Mapping],
    period_days: int = 7,
    num_periods: int = 8,
    now: datetime | str | None = None,
) -> list[CohortData]:
    """Build retention rows for the `num_periods` most recent signup cohorts.

    Args:
        users: rows with "id" and "created_at"
        interactions: rows with "user_id" and "created_at"
        period_days: length of each retention period
        num_periods: periods per cohort, and the number of cohorts returned
        now: reference time; periods starting after it are -1

    Returns:
        CohortData sorted by cohort start date, oldest first.
    """
    reference = resolve_now(now)
    cohorts = _group_by_signup_week(users)
    activity = _activity_index(interactions)
    period = timedelta(days=period_days)

    recent = sorted(cohorts.items())[-num_periods:] if num_periods > 0 else []

    result = []
    for start_day, members in recent:
        cohort_start = start_of_day(start_day)
        retention = []
        for i in range(num_periods):
            period_start = cohort_start + period * i
            period_end = period_start + period
            if period_start > reference:
                retention.append(FUTURE_PERIOD)
                continue

            active = sum(
                1 for user_id in members
                if _active_in(activity.get(user_id, []), period_start, period_end)
            )
            retention.append(round_half_up(active / len(members) * 100) if members else 0)

        result.append(CohortData(
            cohort=cohort_label(start_day),
            start_date=start_day,
            size=len(members),
            retention=retention,
        ))

    logger.debug(f"Built {len(result)} cohorts from {len(cohorts)} signup weeks")
    return result
