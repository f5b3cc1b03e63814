import logging
from dataclasses import dataclass
from datetime import time

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from config import WEEKDAYS

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily_checkin"
WEEKLY_JOB_ID = "weekly_summary"

# a run delayed by a slow event loop still fires, anything older is dropped
MISFIRE_GRACE_SECONDS = 15 * 60


@dataclass(frozen=True)
class RecurringTrigger:
    """Wall-clock trigger: fires at ``at`` local time in ``timezone``,
    optionally only on ``days_of_week`` (``"mon"`` .. ``"sun"``)."""

    at: time
    timezone: str
    days_of_week: tuple = None

    def __post_init__(self):
        for day in self.days_of_week or ():
            if day not in WEEKDAYS:
                raise ValueError(f"unknown weekday {day!r}")

    def build(self) -> CronTrigger:
        return CronTrigger(
            day_of_week=",".join(self.days_of_week) if self.days_of_week else "*",
            hour=self.at.hour,
            minute=self.at.minute,
            second=self.at.second,
            timezone=self.timezone,
        )

    def next_fire_after(self, moment):
        """First fire time at or after the aware datetime ``moment``."""
        return self.build().get_next_fire_time(None, moment)

    def describe(self):
        days = ", ".join(self.days_of_week) if self.days_of_week else "every day"
        return f"{days} at {self.at:%H:%M} {self.timezone}"


class CheckinScheduler:
    """Timer only: owns no business state, just fires the two cycles."""

    def __init__(self, daily_cycle, weekly_cycle, daily_trigger, weekly_trigger, scheduler=None):
        self.daily_cycle = daily_cycle
        self.weekly_cycle = weekly_cycle
        self.daily_trigger = daily_trigger
        self.weekly_trigger = weekly_trigger
        self.scheduler = scheduler or AsyncIOScheduler(timezone=daily_trigger.timezone)

    async def run_daily(self):
        try:
            await self.daily_cycle.run()
        except Exception:
            logger.exception("Error in daily notifications")

    async def run_weekly(self):
        try:
            await self.weekly_cycle.run()
        except Exception:
            logger.exception("Error in weekly summaries")

    def _add(self, func, trigger, job_id, name):
        self.scheduler.add_job(
            func,
            trigger=trigger.build(),
            id=job_id,
            name=name,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )

    def register(self):
        self._add(self.run_daily, self.daily_trigger, DAILY_JOB_ID, "Daily habit check-in")
        self._add(self.run_weekly, self.weekly_trigger, WEEKLY_JOB_ID, "Weekly habit summary")
        logger.info("Daily notifications: %s", self.daily_trigger.describe())
        logger.info("Weekly summaries: %s", self.weekly_trigger.describe())

    def start(self):
        self.register()
        self.scheduler.start()
        logger.info("Scheduler started")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
