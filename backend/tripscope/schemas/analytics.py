from datetime import datetime

from pydantic import BaseModel, Field


class UserRow(BaseModel):
    id: str
    created_at: datetime
    last_active_at: datetime | None = None


class InteractionRow(BaseModel):
    user_id: str
    created_at: datetime
    interaction_type: str | None = None


class ItineraryRow(BaseModel):
    id: str
    user_id: str
    created_at: datetime
    is_public: bool | None = None


class ActivityRow(BaseModel):
    """Comment or saved item: only who and when matter."""
    user_id: str
    created_at: datetime


class BehaviorRow(BaseModel):
    user_id: str
    created_at: datetime
    last_active_at: datetime | None = None
    search_history: list[str] | None = None


class PredictiveReportRequest(BaseModel):
    now: datetime | None = None
    profiles: list[UserRow] = []
    itineraries: list[ItineraryRow] = []
    interactions: list[InteractionRow] = []
    previous_interactions: list[InteractionRow] = []
    comments: list[ActivityRow] = []
    saved_items: list[ActivityRow] = []
    previous_saved_items: list[ActivityRow] = []
    behaviors: list[BehaviorRow] = []


class CohortRequest(BaseModel):
    users: list[UserRow]
    interactions: list[InteractionRow]
    period_days: int = Field(7, ge=1)
    num_periods: int = Field(8, ge=0)
    now: datetime | None = None


class ChurnRiskRequest(BaseModel):
    users: list[UserRow]
    now: datetime | None = None


class FunnelStageIn(BaseModel):
    name: str
    count: int = Field(ge=0)


class FunnelRequest(BaseModel):
    steps: list[FunnelStageIn]


class SearchTrendRequest(BaseModel):
    recent_searches: list[str]
    previous_searches: list[str]


class ForecastRequest(BaseModel):
    values: list[float]
    alpha: float = Field(0.3, gt=0, le=1)
    forecast_periods: int = Field(7, ge=0)
    window: int = Field(7, ge=1)
    periods_ahead: int = Field(1, ge=0)
