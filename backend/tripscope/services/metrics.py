"""Derived metrics: growth, CTR, engagement and health scores, projections."""

from dataclasses import dataclass
from typing import Sequence

from tripscope.services.forecasting import DataPoint, linear_regression, round_half_up

# Engagement weights per action type
ENGAGEMENT_WEIGHTS = {
    "views": 1,
    "likes": 3,
    "comments": 5,
    "saves": 4,
    "shares": 6,
}

# Health label thresholds and display colors
HEALTHY_MIN_SCORE = 70
AT_RISK_MIN_SCORE = 40
HEALTH_COLORS = {
    "Healthy": "#22c55e",
    "At Risk": "#f59e0b",
    "Critical": "#ef4444",
}


@dataclass(frozen=True)
class UserHealthScore:
    score: int      # 0-100
    label: str      # "Healthy" | "At Risk" | "Critical"
    color: str

    def to_dict(self) -> dict:
        return {"score": self.score, "label": self.label, "color": self.color}


@dataclass(frozen=True)
class Projection:
    projected: int
    confidence: int  # round(r2 * 100)

    def to_dict(self) -> dict:
        return {"projected": self.projected, "confidence": self.confidence}


def calculate_growth_rate(current: float, previous: float) -> int:
    """Percentage change from `previous` to `current`.

    Growth from zero is reported as 100 (or 0 when nothing happened).
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def calculate_ctr(clicks: float, impressions: float) -> float:
    """Click-through rate as a percentage with 2 decimals."""
    if impressions == 0:
        return 0
    return round_half_up(clicks / impressions * 10000) / 100


def calculate_engagement_score(
    views: float,
    likes: float,
    comments: float,
    saves: float,
    shares: float,
) -> int:
    """Weighted sum of engagement actions, capped at 100."""
    raw = (
        views * ENGAGEMENT_WEIGHTS["views"]
        + likes * ENGAGEMENT_WEIGHTS["likes"]
        + comments * ENGAGEMENT_WEIGHTS["comments"]
        + saves * ENGAGEMENT_WEIGHTS["saves"]
        + shares * ENGAGEMENT_WEIGHTS["shares"]
    )
    return min(100, round_half_up(raw))


def health_label(score: int) -> str:
    if score >= HEALTHY_MIN_SCORE:
        return "Healthy"
    if score >= AT_RISK_MIN_SCORE:
        return "At Risk"
    return "Critical"


def calculate_user_health_score(
    total_users: int,
    active_users: int,
    new_users: int,
    churned: int,
) -> UserHealthScore:
    """Blend of active ratio, growth ratio and retained ratio into a 0-100 score."""
    if total_users == 0:
        return UserHealthScore(score=0, label="Critical", color=HEALTH_COLORS["Critical"])

    active_ratio = active_users / total_users
    growth_ratio = new_users / max(total_users, 1)
    churn_ratio = churned / max(total_users, 1)

    score = min(100, round_half_up(
        active_ratio * 50
        + growth_ratio * 300  # new/total is usually small, so amplified
        + (1 - churn_ratio) * 20
    ))
    label = health_label(score)
    return UserHealthScore(score=score, label=label, color=HEALTH_COLORS[label])


def project_value(historical_values: Sequence[float], periods_ahead: int) -> Projection:
    """Extrapolate an index-keyed series `periods_ahead` steps past its last value."""
    if len(historical_values) < 2:
        first = historical_values[0] if historical_values else 0
        return Projection(projected=first or 0, confidence=0)

    reg = linear_regression(DataPoint(x, y) for x, y in enumerate(historical_values))
    target_x = len(historical_values) - 1 + periods_ahead
    projected = max(0, round_half_up(reg.predict(target_x)))
    return Projection(projected=projected, confidence=round_half_up(reg.r2 * 100))
