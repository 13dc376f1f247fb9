"""Predictive analytics service: assembles the admin dashboard report.

Takes one AnalyticsDataset of already-fetched rows and composes forecasts,
funnel, churn, cohorts, search trends and headline tiles. No storage access.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from tripscope.config import settings
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
from tripscope.services.churn_service import classify_churn_risk
from tripscope.services.cohort_service import build_cohorts
from tripscope.services.forecasting import (
    DataPoint,
    exponential_smoothing,
    linear_regression,
    round_half_up,
)
from tripscope.services.funnel_service import build_funnel
from tripscope.services.metrics import (
    calculate_ctr,
    calculate_growth_rate,
    calculate_user_health_score,
)
from tripscope.services.search_trends import analyze_search_trends
from tripscope.services.timestamps import resolve_now, to_utc

logger = logging.getLogger(__name__)

TIME_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}


@dataclass
class AnalyticsDataset:
    """Rows fetched by the caller for one report.

    interactions, comments and saved_items cover the current window;
    the previous_* lists cover the window of equal length before it.
    """
    profiles: list[dict] = field(default_factory=list)              # id, created_at
    itineraries: list[dict] = field(default_factory=list)           # id, user_id, created_at
    interactions: list[dict] = field(default_factory=list)          # user_id, interaction_type, created_at
    previous_interactions: list[dict] = field(default_factory=list)
    comments: list[dict] = field(default_factory=list)              # user_id, created_at
    saved_items: list[dict] = field(default_factory=list)           # user_id, created_at
    previous_saved_items: list[dict] = field(default_factory=list)
    behaviors: list[dict] = field(default_factory=list)             # user_id, search_history, last_active_at, created_at


def window_days(time_range: str) -> int:
    try:
        return TIME_RANGE_DAYS[time_range]
    except KeyError:
        raise ValueError(
            f"Unsupported time range {time_range!r}, expected one of {', '.join(TIME_RANGE_DAYS)}"
        ) from None


class PredictiveAnalyticsService:
    """Builds the predictive analytics report for the admin dashboard."""

    def build_report(
        self,
        dataset: AnalyticsDataset,
        time_range: str = "30d",
        now: datetime | str | None = None,
    ) -> dict:
        reference = resolve_now(now)
        days = window_days(time_range)
        window_start = reference - timedelta(days=days)

        user_forecast = self._monthly_forecast(
            [p["created_at"] for p in dataset.profiles], reference
        )
        content_forecast = self._monthly_forecast(
            [it["created_at"] for it in dataset.itineraries], reference
        )
        engagement_forecast = self._engagement_forecast(dataset.interactions, days, reference)

        churn_risk = classify_churn_risk(
            self._activity_users(dataset.behaviors),
            now=reference,
            low_max_days=settings.churn_low_max_days,
            medium_max_days=settings.churn_medium_max_days,
        )
        active = count_active_users(dataset.interactions, now=reference)
        lifecycle = build_user_lifecycle(
            dataset.profiles, dataset.interactions, window_start, churn_risk.high
        )
        new_users = lifecycle[0]["count"]
        health = calculate_user_health_score(
            total_users=len(dataset.profiles),
            active_users=active.mau,
            new_users=new_users,
            churned=churn_risk.high,
        )
        cohorts = build_cohorts(
            dataset.profiles,
            dataset.previous_interactions + dataset.interactions,
            period_days=settings.cohort_period_days,
            num_periods=settings.cohort_num_periods,
            now=reference,
        )
        sessions = summarize_sessions(dataset.interactions, gap_minutes=settings.session_gap_minutes)
        depth = summarize_engagement_depth(
            dataset.interactions,
            comment_count=len(dataset.comments),
            power_user_threshold=settings.power_user_threshold,
        )

        views = sum(1 for i in dataset.interactions if i.get("interaction_type") == "view")
        clicks = len(dataset.saved_items) + len(dataset.comments)
        retention_rate = (
            round_half_up(active.mau / len(dataset.profiles) * 100) if dataset.profiles else 0
        )

        report = {
            "time_range": time_range,
            "generated_at": reference.isoformat(),
            "user_growth_forecast": user_forecast["series"],
            "content_forecast": content_forecast["series"],
            "engagement_forecast": engagement_forecast["series"],
            "user_growth_confidence": user_forecast["confidence"],
            "content_growth_confidence": content_forecast["confidence"],
            "engagement_confidence": engagement_forecast["confidence"],
            "projected_users_next_period": user_forecast["projected"],
            "projected_content_next_period": content_forecast["projected"],
            "search_trends": [t.to_dict() for t in self._search_trends(dataset.behaviors)],
            "link_ctr": calculate_ctr(clicks, views),
            "sessions": sessions.to_dict(),
            "funnel": [s.to_dict() for s in self._platform_funnel(dataset, window_start)],
            "cohorts": [c.to_dict() for c in cohorts],
            "churn_risk": churn_risk.to_dict(),
            "user_lifecycle": lifecycle,
            "active_users": active.to_dict(),
            "retention_rate": retention_rate,
            "interaction_growth": calculate_growth_rate(
                len(dataset.interactions), len(dataset.previous_interactions)
            ),
            "save_growth": calculate_growth_rate(
                len(dataset.saved_items), len(dataset.previous_saved_items)
            ),
            "engagement_depth": depth.to_dict(),
            "health": health.to_dict(),
        }
        logger.info(
            f"Predictive report ({time_range}): {len(dataset.profiles)} profiles, "
            f"{len(dataset.interactions)} interactions, health={health.score} ({health.label})"
        )
        return report

    # ─── Forecasts ───

    def _monthly_forecast(self, timestamps: list, now: datetime) -> dict:
        """Monthly history, smoothed forecast and regression projection for one entity."""
        buckets = build_monthly_buckets(timestamps, settings.monthly_history_months, now=now)
        values = [b["count"] for b in buckets]
        forecast = exponential_smoothing(
            values, settings.forecast_alpha, settings.monthly_forecast_periods
        )
        regression = linear_regression(DataPoint(x, y) for x, y in enumerate(values))

        return {
            "series": build_forecast_series(
                buckets, forecast, future_month_labels(len(forecast), now=now)
            ),
            "confidence": round_half_up(regression.r2 * 100),
            # one period past the history, matching the dashboard's 30-day tile
            "projected": max(0, round_half_up(regression.predict(len(values) + 1))),
        }

    def _engagement_forecast(self, interactions: list[dict], days: int, now: datetime) -> dict:
        """Daily history tail, smoothed forecast and trend confidence for interactions."""
        buckets = build_daily_buckets([i["created_at"] for i in interactions], days, now=now)
        values = [b["count"] for b in buckets]
        forecast = exponential_smoothing(
            values,
            settings.forecast_alpha,
            settings.daily_forecast_periods,
        )
        regression = linear_regression(DataPoint(x, y) for x, y in enumerate(values))
        return {
            "series": build_forecast_series(
                buckets[-settings.daily_history_points:],
                forecast,
                future_day_labels(len(forecast), now=now),
            ),
            "confidence": round_half_up(regression.r2 * 100),
        }

    # ─── Composite sections ───

    def _search_trends(self, behaviors: list[dict]):
        window = settings.search_history_window
        recent: list[str] = []
        previous: list[str] = []
        for behavior in behaviors:
            history = behavior.get("search_history")
            if not isinstance(history, list):
                continue
            recent.extend(history[-window:])
            previous.extend(history[-2 * window:-window])
        return analyze_search_trends(
            recent,
            previous,
            threshold=settings.search_trend_threshold,
            limit=settings.search_trend_limit,
        )

    def _platform_funnel(self, dataset: AnalyticsDataset, window_start: datetime):
        visitors = {i["user_id"] for i in dataset.interactions}
        viewers = {i["user_id"] for i in dataset.interactions if i.get("interaction_type") == "view"}
        engaged = {s["user_id"] for s in dataset.saved_items} | {c["user_id"] for c in dataset.comments}
        creators = {
            it["user_id"] for it in dataset.itineraries
            if to_utc(it["created_at"]) >= window_start
        }
        return build_funnel([
            {"name": "Visited Platform", "count": max(len(visitors), len(dataset.profiles))},
            {"name": "Viewed Content", "count": len(viewers) or len(visitors)},
            {"name": "Engaged (Like/Save/Comment)", "count": len(engaged)},
            {"name": "Created Content", "count": len(creators)},
        ])

    @staticmethod
    def _activity_users(behaviors: list[dict]) -> list[dict]:
        return [
            {
                "id": b["user_id"],
                "last_active_at": b.get("last_active_at"),
                "created_at": b["created_at"],
            }
            for b in behaviors
        ]


predictive_analytics_service = PredictiveAnalyticsService()
