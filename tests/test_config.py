from datetime import date, time

import pytest

from config import Settings, load_settings
from errors import ConfigError
from utils.dates import lookback_window, reference_date, week_window

BASE = {"DATABASE_URL": "postgresql://localhost/habits", "BOT_TOKEN": "123:abc"}


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Clean environment holding only BASE; no .env file in the working directory."""
    monkeypatch.chdir(tmp_path)
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)

    def set_env(values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)

    set_env(BASE)
    return set_env


def test_defaults(env):
    settings = load_settings()

    assert settings.timezone == "Asia/Kolkata"
    assert settings.daily_reminder_time == time(20, 0)
    assert (settings.weekly_summary_day, settings.weekly_summary_time) == ("sun", time(10, 0))
    assert settings.streak_horizon_days == 30
    assert settings.week_start_index == 0
    assert settings.tier_bands == (90.0, 70.0, 50.0, 30.0)
    assert settings.log_level == "INFO"


def test_overrides(env):
    env({
        "TIMEZONE": "Europe/Berlin",
        "DAILY_REMINDER_TIME": "21:30",
        "WEEKLY_SUMMARY_DAY": "Monday",
        "WEEK_START_DAY": "sun",
        "STREAK_HORIZON_DAYS": "14",
        "TIER_BANDS": "80,60,40,20",
        "LOG_LEVEL": "debug",
    })
    settings = load_settings()

    assert settings.tz.key == "Europe/Berlin"
    assert settings.daily_reminder_time == time(21, 30)
    assert settings.weekly_summary_day == "mon"
    assert settings.week_start_index == 6
    assert settings.streak_horizon_days == 14
    assert settings.tier_bands == (80.0, 60.0, 40.0, 20.0)
    assert settings.log_level == "DEBUG"


def test_dotenv_file_is_read(env, monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL")
    (tmp_path / ".env").write_text("DATABASE_URL=postgresql://db/from-file\nWEEKLY_PACING_SECONDS=1.5\n")

    settings = load_settings()

    assert settings.database_url == "postgresql://db/from-file"
    assert settings.weekly_pacing_seconds == 1.5


@pytest.mark.parametrize(
    "override",
    [
        {"TIMEZONE": "Mars/Olympus"},
        {"TIMEZONE": ""},
        {"DAILY_REMINDER_TIME": "8pm"},
        {"WEEKLY_SUMMARY_DAY": "someday"},
        {"STREAK_HORIZON_DAYS": "0"},
        {"STREAK_HORIZON_DAYS": "thirty"},
        {"DAILY_PACING_SECONDS": "-1"},
        {"TIER_BANDS": "30,50,70,90"},
        {"TIER_BANDS": "90,70"},
        {"TIER_BANDS": "90,seventy,50,30"},
        {"LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_are_fatal(env, override):
    env(override)
    with pytest.raises(ConfigError):
        load_settings()


def test_bad_log_level_is_named_in_the_error(env):
    env({"LOG_LEVEL": "verbose"})
    with pytest.raises(ConfigError, match="LOG_LEVEL"):
        load_settings()


def test_missing_required_values(env, monkeypatch):
    monkeypatch.delenv("DATABASE_URL")
    with pytest.raises(ConfigError, match="DATABASE_URL"):
        load_settings()

    env({"DATABASE_URL": BASE["DATABASE_URL"]})
    monkeypatch.delenv("BOT_TOKEN")
    with pytest.raises(ConfigError, match="BOT_TOKEN"):
        load_settings()
    assert load_settings(require_token=False).bot_token is None


def test_week_window_respects_start_day():
    wednesday = date(2026, 10, 14)

    monday_week = week_window(wednesday, 0)
    sunday_week = week_window(wednesday, 6)

    assert (monday_week.start, monday_week.end) == (date(2026, 10, 12), date(2026, 10, 18))
    assert (sunday_week.start, sunday_week.end) == (date(2026, 10, 11), date(2026, 10, 17))
    assert monday_week.label() == "Oct 12 - Oct 18, 2026"


def test_lookback_window_includes_reference():
    window = lookback_window(date(2026, 10, 18), 30)
    assert window.start == date(2026, 9, 19)
    assert date(2026, 10, 18) in window


def test_reference_date_is_local():
    from datetime import datetime, timezone
    from zoneinfo import ZoneInfo

    now = datetime(2026, 10, 18, 23, 0, tzinfo=timezone.utc)
    assert reference_date(ZoneInfo("Asia/Tokyo"), now) == date(2026, 10, 19)
    assert reference_date(ZoneInfo("America/New_York"), now) == date(2026, 10, 18)
