from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Forecasts
    forecast_alpha: float = 0.3
    monthly_history_months: int = 8
    monthly_forecast_periods: int = 3
    daily_forecast_periods: int = 7
    daily_history_points: int = 14  # daily actuals shown before the forecast

    # Cohorts
    cohort_period_days: int = 7
    cohort_num_periods: int = 8

    # Churn (days since last activity)
    churn_low_max_days: int = 7
    churn_medium_max_days: int = 30

    # Sessions / engagement
    session_gap_minutes: int = 30
    power_user_threshold: int = 10

    # Search trends
    search_trend_threshold: float = 20.0
    search_trend_limit: int = 15
    search_history_window: int = 10  # searches per user in each comparison window

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
