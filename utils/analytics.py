import json
from dataclasses import asdict, dataclass
from datetime import timedelta
from enum import Enum

from config import DEFAULT_TIER_BANDS


STREAK_HORIZON = 30


class Denominator(str, Enum):
    FIXED_WEEK = "fixed_week"  # always 7 days, scheduled weekly summary
    OBSERVED = "observed"  # entries actually present, on-demand /summary


class Tier(str, Enum):
    EXCELLENT = "excellent"
    GREAT = "great"
    GOOD = "good"
    FAIR = "fair"
    LOW = "low"


_TIER_ORDER = (Tier.EXCELLENT, Tier.GREAT, Tier.GOOD, Tier.FAIR)


def tier_for(rate, bands=DEFAULT_TIER_BANDS):
    for tier, threshold in zip(_TIER_ORDER, bands):
        if rate >= threshold:
            return tier
    return Tier.LOW


@dataclass(frozen=True)
class HabitSummary:
    habit_id: int
    name: str
    completed_days: int
    total_days: int
    completion_rate: float
    streak: int
    tier: Tier


@dataclass(frozen=True)
class WeeklyStats:
    week_start: object
    week_end: object
    habits: list
    completed: int
    total: int
    overall_completion: float
    overall_tier: Tier

    @property
    def total_habits(self):
        return len(self.habits)

    def to_dict(self):
        data = asdict(self)
        data["week_start"] = self.week_start.isoformat()
        data["week_end"] = self.week_end.isoformat()
        data["total_habits"] = self.total_habits
        return data

    def to_json(self):
        return json.dumps(self.to_dict(), ensure_ascii=False)


def rate(completed, total):
    return completed / total * 100 if total > 0 else 0.0


def compute_streak(entries, reference, horizon=STREAK_HORIZON):
    """Consecutive completed days ending at ``reference``, at most ``horizon``.

    A missing or not-completed day stops the walk, including ``reference`` itself.
    """
    completed = {e.date: e.completed for e in entries}
    streak = 0
    day = reference
    for _ in range(horizon):
        if not completed.get(day):
            break
        streak += 1
        day -= timedelta(days=1)
    return streak


def summarize_habit(habit, entries, window, reference, mode=Denominator.FIXED_WEEK,
                    horizon=STREAK_HORIZON, bands=DEFAULT_TIER_BANDS):
    in_window = [e for e in entries if e.date in window]
    completed_days = sum(1 for e in in_window if e.completed)

    if mode is Denominator.FIXED_WEEK:
        total_days = 7
    elif mode is Denominator.OBSERVED:
        total_days = len(in_window)
    else:
        raise ValueError(f"unknown denominator mode {mode!r}")

    completion_rate = rate(completed_days, total_days)
    return HabitSummary(
        habit_id=habit.id,
        name=habit.name,
        completed_days=completed_days,
        total_days=total_days,
        completion_rate=completion_rate,
        streak=compute_streak(entries, reference, horizon),
        tier=tier_for(completion_rate, bands),
    )


def summarize_week(habit_entries, window, reference, mode=Denominator.FIXED_WEEK,
                   horizon=STREAK_HORIZON, bands=DEFAULT_TIER_BANDS):
    """Roll up ``[(habit, entries), ...]`` into one ``WeeklyStats``.

    ``entries`` may reach further back than ``window`` so the streak can see
    the full horizon; only entries inside ``window`` count towards the rates.
    """
    habits = [
        summarize_habit(habit, entries, window, reference, mode, horizon, bands)
        for habit, entries in habit_entries
    ]
    completed = sum(h.completed_days for h in habits)
    total = sum(h.total_days for h in habits)
    overall = rate(completed, total)

    return WeeklyStats(
        week_start=window.start,
        week_end=window.end,
        habits=habits,
        completed=completed,
        total=total,
        overall_completion=overall,
        overall_tier=tier_for(overall, bands),
    )


def focus_habits(stats):
    return [h for h in stats.habits if h.tier not in (Tier.EXCELLENT, Tier.GREAT)]


def top_habits(stats):
    return [h for h in stats.habits if h.tier is Tier.EXCELLENT]
