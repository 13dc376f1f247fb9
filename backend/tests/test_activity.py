from datetime import datetime, timedelta, timezone

import pytest

from tripscope.services.activity import (
    build_daily_buckets,
    build_forecast_series,
    build_monthly_buckets,
    build_user_lifecycle,
    count_active_users,
    future_day_labels,
    future_month_labels,
    summarize_engagement_depth,
    summarize_sessions,
)


def _dt(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_monthly_buckets(now):
    timestamps = [
        "2024-03-01T00:00:00Z",
        "2024-03-19T10:00:00Z",
        "2024-01-31T23:59:00Z",
        "2023-12-31T12:00:00Z",  # outside the range
    ]
    assert build_monthly_buckets(timestamps, months_back=3, now=now) == [
        {"label": "Jan", "count": 1},
        {"label": "Feb", "count": 0},
        {"label": "Mar", "count": 2},
    ]


def test_monthly_buckets_cross_year_boundary():
    buckets = build_monthly_buckets([], months_back=3, now=_dt(2024, 1, 15))
    assert [b["label"] for b in buckets] == ["Nov", "Dec", "Jan"]


def test_daily_buckets(now):
    timestamps = [_dt(2024, 3, 18, 1), _dt(2024, 3, 20, 9), _dt(2024, 3, 20, 11), _dt(2024, 3, 10)]
    assert build_daily_buckets(timestamps, 3, now=now) == [
        {"label": "3/18", "count": 1},
        {"label": "3/19", "count": 0},
        {"label": "3/20", "count": 2},
    ]


def test_future_labels():
    assert future_month_labels(3, now=_dt(2024, 11, 5)) == ["Dec", "Jan", "Feb"]
    assert future_day_labels(2, now=_dt(2024, 2, 28)) == ["2/29", "3/1"]


def test_forecast_series():
    series = build_forecast_series([{"label": "Jan", "count": 4}], [5, 6], ["Feb", "Mar"])
    assert series == [
        {"label": "Jan", "actual": 4, "forecast": None},
        {"label": "Feb", "actual": None, "forecast": 5},
        {"label": "Mar", "actual": None, "forecast": 6},
    ]


def test_summarize_sessions():
    interactions = [
        {"user_id": "a", "created_at": _dt(2024, 3, 1, 10, 20)},
        {"user_id": "a", "created_at": _dt(2024, 3, 1, 10, 0)},
        {"user_id": "a", "created_at": _dt(2024, 3, 1, 10, 10)},
        {"user_id": "a", "created_at": _dt(2024, 3, 1, 12, 0)},
        {"user_id": "b", "created_at": _dt(2024, 3, 1, 9, 0)},
    ]
    stats = summarize_sessions(interactions, gap_minutes=30)
    assert stats.session_count == 3
    assert stats.avg_duration_seconds == pytest.approx(400)
    assert stats.avg_pages_per_session == 1.7


def test_summarize_sessions_empty():
    assert summarize_sessions([]).to_dict() == {
        "session_count": 0,
        "avg_duration_seconds": 0.0,
        "avg_pages_per_session": 0.0,
    }


def test_count_active_users(now):
    interactions = [
        {"user_id": "u1", "created_at": now - timedelta(hours=2)},
        {"user_id": "u1", "created_at": now - timedelta(days=3)},
        {"user_id": "u2", "created_at": now - timedelta(days=3)},
        {"user_id": "u3", "created_at": now - timedelta(days=20)},
        {"user_id": "u4", "created_at": now - timedelta(days=40)},
    ]
    counts = count_active_users(interactions, now=now)
    assert counts.to_dict() == {"dau": 1, "wau": 2, "mau": 3, "stickiness": 33}


def test_count_active_users_without_activity(now):
    assert count_active_users([], now=now).stickiness == 0


def test_user_lifecycle(now):
    window_start = now - timedelta(days=30)
    profiles = [
        {"id": "p1", "created_at": now - timedelta(days=2)},
        {"id": "p2", "created_at": now - timedelta(days=90)},
        {"id": "p3", "created_at": now - timedelta(days=90)},
    ]
    interactions = [{"user_id": "p2", "created_at": now}, {"user_id": "p1", "created_at": now}]
    stages = build_user_lifecycle(profiles, interactions, window_start, high_churn=4)
    assert [(s["stage"], s["count"]) for s in stages] == [
        ("New Users", 1),
        ("Active / Returning", 1),
        ("Dormant", 1),
        ("High Churn Risk", 4),
    ]


def test_engagement_depth():
    interactions = [{"user_id": "u1", "interaction_type": "view"} for _ in range(10)]
    interactions += [
        {"user_id": "u2", "interaction_type": "like"},
        {"user_id": "u2", "interaction_type": "save"},
    ]
    depth = summarize_engagement_depth(interactions, comment_count=3, power_user_threshold=10)
    assert depth.to_dict() == {
        "avg_views_per_user": 5,
        "avg_likes_per_user": 0.5,
        "avg_saves_per_user": 0.5,
        "avg_comments_per_user": 1.5,
        "power_users": 1,
    }


def test_engagement_depth_without_interactions():
    depth = summarize_engagement_depth([], comment_count=2)
    assert depth.avg_comments_per_user == 2.0
    assert depth.power_users == 0
