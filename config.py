from datetime import time
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode

from errors import ConfigError


WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DEFAULT_TIER_BANDS = (90.0, 70.0, 50.0, 30.0)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Process configuration, read from the environment or a ``.env`` file.

    Field names map to upper-case variables: ``daily_reminder_time`` is
    ``DAILY_REMINDER_TIME``. ``TIER_BANDS`` is a comma separated list.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore", "frozen": True}

    database_url: str = Field(min_length=1)
    bot_token: str | None = None
    timezone: str = "Asia/Kolkata"
    daily_reminder_time: time = time(20, 0)
    weekly_summary_day: str = "sun"
    weekly_summary_time: time = time(10, 0)
    streak_horizon_days: int = Field(30, ge=1)
    week_start_day: str = "mon"
    daily_pacing_seconds: float = Field(0.1, ge=0)
    weekly_pacing_seconds: float = Field(0.2, ge=0)
    tier_bands: Annotated[tuple[float, ...], NoDecode] = DEFAULT_TIER_BANDS
    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value):
        if not value:
            raise ValueError("time zone is empty")
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown time zone {value!r}") from None
        return value

    @field_validator("weekly_summary_day", "week_start_day")
    @classmethod
    def _weekday(cls, value):
        day = value.strip().lower()[:3]
        if day not in WEEKDAYS:
            raise ValueError(f"must be one of {', '.join(WEEKDAYS)}, got {value!r}")
        return day

    @field_validator("tier_bands", mode="before")
    @classmethod
    def _split_bands(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("tier_bands")
    @classmethod
    def _descending_bands(cls, value):
        if len(value) != len(DEFAULT_TIER_BANDS):
            raise ValueError(f"needs {len(DEFAULT_TIER_BANDS)} thresholds, got {len(value)}")
        if list(value) != sorted(value, reverse=True):
            raise ValueError("thresholds must be in descending order")
        return value

    @field_validator("log_level")
    @classmethod
    def _log_level(cls, value):
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def week_start_index(self) -> int:
        return WEEKDAYS.index(self.week_start_day)


def load_settings(require_token=True, **overrides) -> Settings:
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']).upper()}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from None

    if require_token and not settings.bot_token:
        raise ConfigError("BOT_TOKEN is not set")
    return settings
