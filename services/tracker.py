import logging
from dataclasses import dataclass
from enum import Enum

from errors import HabitNotTrackable

logger = logging.getLogger(__name__)


class DispatchOutcome(str, Enum):
    SENT = "sent"
    SKIPPED_DISABLED = "skipped_disabled"
    SKIPPED_NO_HABITS = "skipped_no_habits"
    SUPPRESSED = "suppressed"
    ALREADY_SENT = "already_sent"


@dataclass(frozen=True)
class HabitStatus:
    habit: object
    entry: object = None

    @property
    def checked_in(self):
        return self.entry is not None


class NotificationTracker:
    """Decides per user and calendar day whether a reminder goes out,
    and records the answers that close the loop for that day."""

    def __init__(self, store, gateway):
        self.store = store
        self.gateway = gateway

    async def dispatch(self, user, day):
        if not user.notifications_enabled:
            logger.debug("User %s has notifications disabled", user.telegram_id)
            return DispatchOutcome.SKIPPED_DISABLED

        habits = await self.store.get_trackable_habits(user.id)
        if not habits:
            logger.debug("User %s has no trackable habits", user.telegram_id)
            return DispatchOutcome.SKIPPED_NO_HABITS

        # any entry for the day counts as engaged, even if other habits are unanswered
        if await self.store.has_any_entry_for_date(user.id, day):
            logger.info("Skipping reminder for user %s - already checked in on %s", user.telegram_id, day)
            return DispatchOutcome.SUPPRESSED

        existing = await self.store.get_notification(user.id, day)
        if existing is not None and existing.sent:
            logger.info("Reminder for user %s on %s was already sent", user.telegram_id, day)
            return DispatchOutcome.ALREADY_SENT

        await self.store.upsert_notification(user.id, day)
        await self.store.mark_notification_sent(user.id, day)
        await self.gateway.send_reminder(user, habits, day)
        return DispatchOutcome.SENT

    async def record_response(self, user_id, habit_id, day, completed):
        habit = await self.store.get_habit(habit_id)
        if habit is None or not habit.is_active or habit.user_id != user_id:
            raise HabitNotTrackable(habit_id, user_id)

        entry = await self.store.upsert_habit_entry(habit_id, day, completed)
        await self.store.mark_notification_responded(user_id, day)
        return entry

    async def today_status(self, user_id, day):
        habits = await self.store.get_trackable_habits(user_id)
        entries = {e.habit_id: e for e in await self.store.get_entries_for_date(user_id, day)}
        return [HabitStatus(h, entries.get(h.id)) for h in habits]
