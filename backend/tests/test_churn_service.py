import pytest

from tripscope.services.churn_service import ChurnRiskSummary, churn_tier, classify_churn_risk


@pytest.mark.parametrize(
    "days, tier",
    [(0, "low"), (7, "low"), (8, "medium"), (30, "medium"), (31, "high"), (400, "high")],
)
def test_churn_tier_thresholds(days, tier):
    assert churn_tier(days) == tier


def test_classify_churn_risk(now):
    users = [
        {"id": "a", "last_active_at": "2024-03-18T12:00:00Z", "created_at": "2023-01-01T00:00:00Z"},
        {"id": "b", "last_active_at": "2024-03-13T11:00:00Z", "created_at": "2023-01-01T00:00:00Z"},
        {"id": "c", "last_active_at": "2024-03-12T00:00:00Z", "created_at": "2023-01-01T00:00:00Z"},
        {"id": "d", "last_active_at": "2024-02-19T12:00:00Z", "created_at": "2023-01-01T00:00:00Z"},
        {"id": "e", "last_active_at": "2024-01-01T00:00:00Z", "created_at": "2023-01-01T00:00:00Z"},
        {"id": "f", "last_active_at": None, "created_at": "2024-03-19T00:00:00Z"},
        {"id": "g", "created_at": "2023-06-01T00:00:00Z"},
    ]
    summary = classify_churn_risk(users, now=now)
    assert summary == ChurnRiskSummary(low=3, medium=2, high=2, total=7)
    assert summary.low + summary.medium + summary.high == summary.total


def test_custom_thresholds(now):
    users = [{"id": "a", "last_active_at": "2024-03-15T12:00:00Z", "created_at": "2024-01-01T00:00:00Z"}]
    assert classify_churn_risk(users, now=now, low_max_days=3, medium_max_days=4).high == 1


def test_no_users(now):
    assert classify_churn_risk([], now=now).to_dict() == {"low": 0, "medium": 0, "high": 0, "total": 0}
