"""Analytics router: predictive dashboard report and individual calculators.

Callers post rows they already fetched; nothing here touches storage.
"""

import logging

from fastapi import APIRouter, HTTPException

from tripscope.config import settings
from tripscope.schemas.analytics import (
    ChurnRiskRequest,
    CohortRequest,
    ForecastRequest,
    FunnelRequest,
    PredictiveReportRequest,
    SearchTrendRequest,
)
from tripscope.services.churn_service import classify_churn_risk
from tripscope.services.cohort_service import build_cohorts
from tripscope.services.forecasting import (
    DataPoint,
    exponential_smoothing,
    linear_regression,
    moving_average,
)
from tripscope.services.funnel_service import build_funnel
from tripscope.services.metrics import project_value
from tripscope.services.predictive_analytics_service import (
    AnalyticsDataset,
    predictive_analytics_service,
)
from tripscope.services.search_trends import analyze_search_trends

logger = logging.getLogger(__name__)

router = APIRouter()


def _rows(models) -> list[dict]:
    return [m.model_dump() for m in models]


@router.post("/predictive")
async def get_predictive_report(body: PredictiveReportRequest, time_range: str = "30d"):
    """Full predictive analytics report for the admin dashboard."""
    dataset = AnalyticsDataset(
        profiles=_rows(body.profiles),
        itineraries=_rows(body.itineraries),
        interactions=_rows(body.interactions),
        previous_interactions=_rows(body.previous_interactions),
        comments=_rows(body.comments),
        saved_items=_rows(body.saved_items),
        previous_saved_items=_rows(body.previous_saved_items),
        behaviors=_rows(body.behaviors),
    )
    try:
        return predictive_analytics_service.build_report(dataset, time_range=time_range, now=body.now)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/cohorts")
async def get_cohorts(body: CohortRequest):
    """Weekly signup cohorts with per-period retention."""
    cohorts = build_cohorts(
        _rows(body.users),
        _rows(body.interactions),
        period_days=body.period_days,
        num_periods=body.num_periods,
        now=body.now,
    )
    return [c.to_dict() for c in cohorts]


@router.post("/churn-risk")
async def get_churn_risk(body: ChurnRiskRequest):
    """Users bucketed by days since last activity."""
    return classify_churn_risk(
        _rows(body.users),
        now=body.now,
        low_max_days=settings.churn_low_max_days,
        medium_max_days=settings.churn_medium_max_days,
    ).to_dict()


@router.post("/funnel")
async def get_funnel(body: FunnelRequest):
    return [s.to_dict() for s in build_funnel(_rows(body.steps))]


@router.post("/search-trends")
async def get_search_trends(body: SearchTrendRequest):
    trends = analyze_search_trends(
        body.recent_searches,
        body.previous_searches,
        threshold=settings.search_trend_threshold,
        limit=settings.search_trend_limit,
    )
    return [t.to_dict() for t in trends]


@router.post("/forecast")
async def get_forecast(body: ForecastRequest):
    """Trend, smoothed forecast, moving average and projection for one series."""
    regression = linear_regression(DataPoint(x, y) for x, y in enumerate(body.values))
    logger.debug(f"Forecast request: {len(body.values)} values, {body.forecast_periods} periods")
    return {
        "regression": regression.to_dict(),
        "forecast": exponential_smoothing(body.values, body.alpha, body.forecast_periods),
        "moving_average": moving_average(body.values, body.window),
        "projection": project_value(body.values, body.periods_ahead).to_dict(),
    }
