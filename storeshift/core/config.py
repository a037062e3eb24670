from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./storeshift.db"

    # Scheduling
    MAX_SCHEDULE_SPAN_DAYS: int = 7
    CLOPENING_MIN_REST_HOURS: float = 12
    MAX_CONSECUTIVE_DAYS: int = 5
    HOLIDAY_DEDUCTION_HOURS: float = 8
    HOLIDAY_ELIGIBILITY_DAYS: int = 30
    CLOSED_ON_HOLIDAYS: bool = True
    DEFAULT_PART_TIME_DAYS: int = 5
    UNPAID_BREAK_THRESHOLD_HOURS: float = 6
    UNPAID_BREAK_HOURS: float = 0.5
    DEFAULT_APPAREL_STATIONS: int = 2
    DEFAULT_PRICER_STATIONS: int = 1
    PRIORITY_WEEKDAYS: list[int] = [4, 5, 6]  # Fri, Sat, Sun
    MANAGER_MAX_CLOSES: int = 3
    MANAGERS_REQUIRED: int = 1  # leadership shifts needed on open and on close

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
