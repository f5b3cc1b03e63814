import functools
import logging

import asyncpg

from errors import StoreError
from models import Habit, HabitEntry, Notification, User, WeeklySummary

logger = logging.getLogger(__name__)


def _store_call(func):
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.warning("Store call %s failed: %s", func.__name__, e)
            raise StoreError(f"{func.__name__} failed: {e}") from e
    return wrapper


class EntryStore:
    """Repository over the shared asyncpg pool.

    Every keyed write is an ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent
    writers converge on one row per key (last write wins).
    """

    def __init__(self, pool):
        self.pool = pool

    # ---------- users ----------

    @_store_call
    async def get_or_create_user(self, telegram_id, username=None, first_name=None, last_name=None):
        row = await self.pool.fetchrow(
            """
            INSERT INTO users (telegram_id, username, first_name, last_name)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (telegram_id) DO UPDATE
                SET username = EXCLUDED.username,
                    first_name = EXCLUDED.first_name,
                    last_name = EXCLUDED.last_name,
                    updated_at = NOW()
            RETURNING *, (xmax = 0) AS inserted
            """,
            telegram_id, username, first_name, last_name,
        )
        return User.from_record(row), row["inserted"]

    @_store_call
    async def get_user_by_telegram_id(self, telegram_id):
        row = await self.pool.fetchrow("SELECT * FROM users WHERE telegram_id=$1", telegram_id)
        return User.from_record(row) if row else None

    @_store_call
    async def set_notifications(self, user_id, enabled):
        await self.pool.execute(
            "UPDATE users SET notifications_enabled=$1, updated_at=NOW() WHERE id=$2",
            enabled, user_id,
        )

    @_store_call
    async def get_active_notifiable_users(self):
        rows = await self.pool.fetch(
            """
            SELECT * FROM users
            WHERE is_active=TRUE AND notifications_enabled=TRUE
            ORDER BY id
            """
        )
        return [User.from_record(r) for r in rows]

    # ---------- habits ----------

    @_store_call
    async def create_habit(self, user_id, name, description=None):
        row = await self.pool.fetchrow(
            """
            INSERT INTO habits (user_id, name, description)
            VALUES ($1, $2, $3)
            RETURNING *
            """,
            user_id, name, description,
        )
        return Habit.from_record(row)

    @_store_call
    async def get_trackable_habits(self, user_id):
        rows = await self.pool.fetch(
            """
            SELECT * FROM habits
            WHERE user_id=$1 AND is_active=TRUE
            ORDER BY created_at, id
            """,
            user_id,
        )
        return [Habit.from_record(r) for r in rows]

    @_store_call
    async def get_habit(self, habit_id):
        row = await self.pool.fetchrow("SELECT * FROM habits WHERE id=$1", habit_id)
        return Habit.from_record(row) if row else None

    @_store_call
    async def deactivate_habit(self, habit_id, user_id):
        result = await self.pool.execute(
            """
            UPDATE habits SET is_active=FALSE, updated_at=NOW()
            WHERE id=$1 AND user_id=$2 AND is_active=TRUE
            """,
            habit_id, user_id,
        )
        return result.endswith(" 1")

    # ---------- entries ----------

    @_store_call
    async def upsert_habit_entry(self, habit_id, day, completed):
        row = await self.pool.fetchrow(
            """
            INSERT INTO habit_entries (habit_id, date, completed)
            VALUES ($1, $2, $3)
            ON CONFLICT (habit_id, date)
            DO UPDATE SET completed = EXCLUDED.completed, created_at = NOW()
            RETURNING *
            """,
            habit_id, day, completed,
        )
        return HabitEntry.from_record(row)

    @_store_call
    async def get_habit_entries_in_range(self, habit_id, start, end):
        rows = await self.pool.fetch(
            """
            SELECT * FROM habit_entries
            WHERE habit_id=$1 AND date BETWEEN $2 AND $3
            ORDER BY date
            """,
            habit_id, start, end,
        )
        return [HabitEntry.from_record(r) for r in rows]

    @_store_call
    async def get_entries_for_date(self, user_id, day):
        rows = await self.pool.fetch(
            """
            SELECT e.* FROM habit_entries e
            JOIN habits h ON e.habit_id = h.id
            WHERE h.user_id=$1 AND e.date=$2 AND h.is_active=TRUE
            """,
            user_id, day,
        )
        return [HabitEntry.from_record(r) for r in rows]

    @_store_call
    async def has_any_entry_for_date(self, user_id, day):
        return await self.pool.fetchval(
            """
            SELECT EXISTS (
                SELECT 1 FROM habit_entries e
                JOIN habits h ON e.habit_id = h.id
                WHERE h.user_id=$1 AND e.date=$2 AND h.is_active=TRUE
            )
            """,
            user_id, day,
        )

    # ---------- notifications ----------

    @_store_call
    async def upsert_notification(self, user_id, day):
        row = await self.pool.fetchrow(
            """
            INSERT INTO notifications (user_id, date)
            VALUES ($1, $2)
            ON CONFLICT (user_id, date)
            DO UPDATE SET created_at = NOW()
            RETURNING *
            """,
            user_id, day,
        )
        return Notification.from_record(row)

    @_store_call
    async def get_notification(self, user_id, day):
        row = await self.pool.fetchrow(
            "SELECT * FROM notifications WHERE user_id=$1 AND date=$2",
            user_id, day,
        )
        return Notification.from_record(row) if row else None

    @_store_call
    async def mark_notification_sent(self, user_id, day):
        await self.pool.execute(
            """
            UPDATE notifications SET sent=TRUE, sent_at=NOW()
            WHERE user_id=$1 AND date=$2
            """,
            user_id, day,
        )

    @_store_call
    async def mark_notification_responded(self, user_id, day):
        # a check-in before the reminder still has to leave a row behind
        await self.pool.execute(
            """
            INSERT INTO notifications (user_id, date, responded, responded_at)
            VALUES ($1, $2, TRUE, NOW())
            ON CONFLICT (user_id, date)
            DO UPDATE SET responded = TRUE, responded_at = NOW()
            """,
            user_id, day,
        )

    # ---------- weekly summaries ----------

    @_store_call
    async def upsert_weekly_summary(self, user_id, week_start, week_end, summary_data):
        row = await self.pool.fetchrow(
            """
            INSERT INTO weekly_summaries (user_id, week_start, week_end, summary_data)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_id, week_start)
            DO UPDATE SET week_end = EXCLUDED.week_end,
                          summary_data = EXCLUDED.summary_data,
                          sent_at = NOW()
            RETURNING *
            """,
            user_id, week_start, week_end, summary_data,
        )
        return WeeklySummary.from_record(row)
