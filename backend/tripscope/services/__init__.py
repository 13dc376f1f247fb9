"""Analytics services: pure calculators over caller-supplied rows.

Modules:
    timestamps                  Timestamp coercion and UTC calendar helpers
    forecasting                 Linear regression, exponential smoothing, moving average
    metrics                     Growth rate, CTR, engagement/health scores, projections
    formatting                  Display formatting for durations, percentages, counts
    cohort_service              Weekly signup cohorts and period retention
    churn_service               Recency-based churn risk buckets
    funnel_service              Stage-over-stage conversion and drop-off
    search_trends               Search term frequency comparison between two windows
    activity                    Bucketing, sessions, active users, lifecycle, engagement depth
    predictive_analytics_service  Full admin dashboard report
"""
