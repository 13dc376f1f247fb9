"""Activity aggregation: time buckets, sessions, active users, lifecycle, engagement depth.

These feed the forecasts and headline tiles of the admin dashboard. Every
function takes already-fetched rows and an optional reference `now`.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence

from tripscope.services.forecasting import round_half_up
from tripscope.services.timestamps import resolve_now, to_utc

logger = logging.getLogger(__name__)

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

LIFECYCLE_COLORS = {
    "New Users": "#22c55e",
    "Active / Returning": "#3b82f6",
    "Dormant": "#f59e0b",
    "High Churn Risk": "#ef4444",
}


def _one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """(year, month) moved by `offset` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def day_label(day: date) -> str:
    return f"{day.month}/{day.day}"


# ─── Time buckets ───


def build_monthly_buckets(
    timestamps: Iterable[datetime | str],
    months_back: int = 8,
    now: datetime | str | None = None,
) -> list[dict]:
    """Counts per calendar month for the last `months_back` months, oldest first."""
    reference = resolve_now(now)
    keys = [_shift_month(reference.year, reference.month, -i) for i in range(months_back - 1, -1, -1)]
    counts = dict.fromkeys(keys, 0)

    for ts in timestamps:
        moment = to_utc(ts)
        key = (moment.year, moment.month)
        if key in counts:
            counts[key] += 1

    return [{"label": MONTH_LABELS[month - 1], "count": count} for (_, month), count in counts.items()]


def build_daily_buckets(
    timestamps: Iterable[datetime | str],
    days_back: int,
    now: datetime | str | None = None,
) -> list[dict]:
    """Counts per UTC day for the last `days_back` days, ending today."""
    today = resolve_now(now).date()
    counts = dict.fromkeys((today - timedelta(days=i) for i in range(days_back - 1, -1, -1)), 0)

    for ts in timestamps:
        day = to_utc(ts).date()
        if day in counts:
            counts[day] += 1

    return [{"label": day_label(day), "count": count} for day, count in counts.items()]


def future_month_labels(periods: int, now: datetime | str | None = None) -> list[str]:
    reference = resolve_now(now)
    return [
        MONTH_LABELS[_shift_month(reference.year, reference.month, i)[1] - 1]
        for i in range(1, periods + 1)
    ]


def future_day_labels(periods: int, now: datetime | str | None = None) -> list[str]:
    today = resolve_now(now).date()
    return [day_label(today + timedelta(days=i)) for i in range(1, periods + 1)]


def build_forecast_series(
    buckets: Sequence[dict],
    forecast: Sequence[int],
    future_labels: Sequence[str],
) -> list[dict]:
    """Chart series: actual points for history followed by forecast points."""
    series = [{"label": b["label"], "actual": b["count"], "forecast": None} for b in buckets]
    series.extend(
        {"label": label, "actual": None, "forecast": value}
        for label, value in zip(future_labels, forecast)
    )
    return series


# ─── Sessions ───


@dataclass(frozen=True)
class SessionStats:
    session_count: int = 0
    avg_duration_seconds: float = 0.0
    avg_pages_per_session: float = 0.0

    def to_dict(self) -> dict:
        return {
            "session_count": self.session_count,
            "avg_duration_seconds": self.avg_duration_seconds,
            "avg_pages_per_session": self.avg_pages_per_session,
        }


def summarize_sessions(interactions: Iterable[Mapping], gap_minutes: int = 30) -> SessionStats:
    """Split each user's actions into sessions at gaps longer than `gap_minutes`."""
    by_user: dict[object, list[datetime]] = defaultdict(list)
    for interaction in interactions:
        by_user[interaction["user_id"]].append(to_utc(interaction["created_at"]))

    max_gap = timedelta(minutes=gap_minutes)
    session_count = 0
    total_seconds = 0.0
    total_pages = 0

    for stamps in by_user.values():
        stamps.sort()
        session_start = stamps[0]
        pages = 1
        for prev, current in zip(stamps, stamps[1:]):
            if current - prev > max_gap:
                total_seconds += (prev - session_start).total_seconds()
                total_pages += pages
                session_count += 1
                session_start = current
                pages = 1
            else:
                pages += 1
        total_seconds += (stamps[-1] - session_start).total_seconds()
        total_pages += pages
        session_count += 1

    if session_count == 0:
        return SessionStats()
    logger.debug(f"Sessionized {len(by_user)} users into {session_count} sessions")
    return SessionStats(
        session_count=session_count,
        avg_duration_seconds=total_seconds / session_count,
        avg_pages_per_session=_one_decimal(total_pages / session_count),
    )


# ─── Active users ───


@dataclass(frozen=True)
class ActiveUserCounts:
    dau: int = 0
    wau: int = 0
    mau: int = 0
    stickiness: int = 0  # DAU/MAU percent

    def to_dict(self) -> dict:
        return {"dau": self.dau, "wau": self.wau, "mau": self.mau, "stickiness": self.stickiness}


def count_active_users(
    interactions: Iterable[Mapping],
    now: datetime | str | None = None,
) -> ActiveUserCounts:
    """Distinct users active in the last 1, 7 and 30 days."""
    reference = resolve_now(now)
    day_ago = reference - timedelta(days=1)
    week_ago = reference - timedelta(days=7)
    month_ago = reference - timedelta(days=30)

    daily, weekly, monthly = set(), set(), set()
    for interaction in interactions:
        moment = to_utc(interaction["created_at"])
        user_id = interaction["user_id"]
        if moment >= month_ago:
            monthly.add(user_id)
        if moment >= week_ago:
            weekly.add(user_id)
        if moment >= day_ago:
            daily.add(user_id)

    mau = len(monthly)
    stickiness = round_half_up(len(daily) / mau * 100) if mau > 0 else 0
    return ActiveUserCounts(dau=len(daily), wau=len(weekly), mau=mau, stickiness=stickiness)


# ─── Lifecycle ───


def build_user_lifecycle(
    profiles: Sequence[Mapping],
    interactions: Iterable[Mapping],
    window_start: datetime | str,
    high_churn: int,
) -> list[dict]:
    """Users split into new, returning and dormant, plus the high churn count."""
    start = to_utc(window_start)
    active_ids = {i["user_id"] for i in interactions}

    new_users = 0
    returning = 0
    for profile in profiles:
        if to_utc(profile["created_at"]) >= start:
            new_users += 1
        elif profile["id"] in active_ids:
            returning += 1
    dormant = max(0, len(profiles) - new_users - returning)

    stages = [
        ("New Users", new_users),
        ("Active / Returning", returning),
        ("Dormant", dormant),
        ("High Churn Risk", high_churn),
    ]
    return [{"stage": stage, "count": count, "color": LIFECYCLE_COLORS[stage]} for stage, count in stages]


# ─── Engagement depth ───


@dataclass(frozen=True)
class EngagementDepth:
    avg_views_per_user: int = 0
    avg_likes_per_user: float = 0.0
    avg_saves_per_user: float = 0.0
    avg_comments_per_user: float = 0.0
    power_users: int = 0

    def to_dict(self) -> dict:
        return {
            "avg_views_per_user": self.avg_views_per_user,
            "avg_likes_per_user": self.avg_likes_per_user,
            "avg_saves_per_user": self.avg_saves_per_user,
            "avg_comments_per_user": self.avg_comments_per_user,
            "power_users": self.power_users,
        }


def summarize_engagement_depth(
    interactions: Sequence[Mapping],
    comment_count: int = 0,
    power_user_threshold: int = 10,
) -> EngagementDepth:
    """Per-active-user action averages and the number of power users."""
    per_user = Counter(i["user_id"] for i in interactions)
    by_type = Counter(i.get("interaction_type") for i in interactions)
    active = len(per_user) or 1

    return EngagementDepth(
        avg_views_per_user=round_half_up(by_type["view"] / active),
        avg_likes_per_user=_one_decimal(by_type["like"] / active),
        avg_saves_per_user=_one_decimal(by_type["save"] / active),
        avg_comments_per_user=_one_decimal(comment_count / active),
        power_users=sum(1 for count in per_user.values() if count >= power_user_threshold),
    )
