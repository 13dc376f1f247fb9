"""Churn service: buckets users by days since their last activity."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from tripscope.services.timestamps import days_between, resolve_now, to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChurnRiskSummary:
    low: int = 0
    medium: int = 0
    high: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {"low": self.low, "medium": self.medium, "high": self.high, "total": self.total}


def churn_tier(days_since_active: int, low_max_days: int = 7, medium_max_days: int = 30) -> str:
    if days_since_active <= low_max_days:
        return "low"
    if days_since_active <= medium_max_days:
        return "medium"
    return "high"


def classify_churn_risk(
    users: Iterable[Mapping],
    now: datetime | str | None = None,
    low_max_days: int = 7,
    medium_max_days: int = 30,
) -> ChurnRiskSummary:
    """Count users per churn tier.

    Last activity is "last_active_at", falling back to "created_at" when
    missing or null. Days are whole days before `now`, floored.
    """
    reference = resolve_now(now)
    counts = {"low": 0, "medium": 0, "high": 0}
    total = 0

    for user in users:
        last_active = user.get("last_active_at") or user["created_at"]
        days = days_between(to_utc(last_active), reference)
        counts[churn_tier(days, low_max_days, medium_max_days)] += 1
        total += 1

    logger.debug(f"Churn risk over {total} users: {counts}")
    return ChurnRiskSummary(total=total, **counts)
