import asyncio
import logging
from dataclasses import dataclass, field

from config import DEFAULT_TIER_BANDS
from services.tracker import DispatchOutcome
from utils.analytics import STREAK_HORIZON, Denominator, summarize_week
from utils.dates import covering, local_now, lookback_window, week_window

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    failed_users: list = field(default_factory=list)

    @property
    def processed(self):
        return self.sent + self.skipped + self.failed


class DailyCycle:
    """LIST_USERS -> FOR_EACH(DISPATCH_OR_SKIP) -> DONE, one user at a time."""

    def __init__(self, store, tracker, tz, pacing=0.1):
        self.store = store
        self.tracker = tracker
        self.tz = tz
        self.pacing = pacing

    async def run(self, now=None):
        local = local_now(self.tz, now)
        day = local.date()
        logger.info("Starting daily notifications at %s", local.strftime("%Y-%m-%d %H:%M:%S"))

        users = await self.store.get_active_notifiable_users()
        logger.info("Sending notifications to %d users", len(users))

        report = CycleReport()
        for user in users:
            try:
                outcome = await self.tracker.dispatch(user, day)
            except Exception:
                logger.exception("Failed to send notification to user %s", user.telegram_id)
                report.failed += 1
                report.failed_users.append(user.id)
            else:
                if outcome is DispatchOutcome.SENT:
                    report.sent += 1
                else:
                    report.skipped += 1
            # outbound rate limit of the gateway
            await asyncio.sleep(self.pacing)

        logger.info(
            "Daily notifications completed: %d sent, %d skipped, %d failed",
            report.sent, report.skipped, report.failed,
        )
        return report


class WeeklyCycle:
    def __init__(self, store, gateway, tz, week_start=0, horizon=STREAK_HORIZON,
                 bands=DEFAULT_TIER_BANDS, pacing=0.2):
        self.store = store
        self.gateway = gateway
        self.tz = tz
        self.week_start = week_start
        self.horizon = horizon
        self.bands = bands
        self.pacing = pacing

    async def build_stats(self, user_id, reference, mode):
        """Aggregate the week containing ``reference``; ``None`` without trackable habits."""
        habits = await self.store.get_trackable_habits(user_id)
        if not habits:
            return None

        window = week_window(reference, self.week_start)
        span = covering(window, lookback_window(reference, self.horizon))

        habit_entries = []
        for habit in habits:
            entries = await self.store.get_habit_entries_in_range(habit.id, span.start, span.end)
            habit_entries.append((habit, entries))

        return summarize_week(habit_entries, window, reference, mode, self.horizon, self.bands)

    async def run(self, now=None):
        local = local_now(self.tz, now)
        reference = local.date()
        logger.info("Starting weekly summaries at %s", local.strftime("%Y-%m-%d %H:%M:%S"))

        users = await self.store.get_active_notifiable_users()
        logger.info("Generating summaries for %d users", len(users))

        report = CycleReport()
        for user in users:
            try:
                stats = await self.build_stats(user.id, reference, Denominator.FIXED_WEEK)
                if stats is None:
                    logger.debug("No trackable habits for user %s, no summary", user.telegram_id)
                    report.skipped += 1
                else:
                    await self.store.upsert_weekly_summary(
                        user.id, stats.week_start, stats.week_end, stats.to_json()
                    )
                    await self.gateway.send_weekly_summary(user, stats)
                    report.sent += 1
            except Exception:
                logger.exception("Failed to send weekly summary to user %s", user.telegram_id)
                report.failed += 1
                report.failed_users.append(user.id)
            await asyncio.sleep(self.pacing)

        logger.info(
            "Weekly summaries completed: %d sent, %d skipped, %d failed",
            report.sent, report.skipped, report.failed,
        )
        return report

    async def on_demand(self, user_id, now=None):
        reference = local_now(self.tz, now).date()
        return await self.build_stats(user_id, reference, Denominator.OBSERVED)
