from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from errors import GatewayError, StoreError  # noqa: E402
from models import Habit, HabitEntry, Notification, User, WeeklySummary  # noqa: E402


def _now():
    return datetime.now(timezone.utc)


class FakeStore:
    """In-memory EntryStore keyed exactly like the unique constraints in models.sql."""

    def __init__(self):
        self.users = {}
        self.habits = {}
        self.entries = {}  # (habit_id, date) -> HabitEntry
        self.notifications = {}  # (user_id, date) -> Notification
        self.summaries = {}  # (user_id, week_start) -> WeeklySummary
        self.failing_users = set()
        self.calls = []
        self._ids = 0

    def _next_id(self):
        self._ids += 1
        return self._ids

    def _check(self, user_id):
        if user_id in self.failing_users:
            raise StoreError(f"store down for user {user_id}")

    # ---------- users ----------

    def add_user(self, telegram_id=None, notifications_enabled=True, is_active=True):
        uid = self._next_id()
        user = User(
            id=uid,
            telegram_id=telegram_id or 1000 + uid,
            is_active=is_active,
            notifications_enabled=notifications_enabled,
        )
        self.users[uid] = user
        return user

    async def get_or_create_user(self, telegram_id, username=None, first_name=None, last_name=None):
        existing = await self.get_user_by_telegram_id(telegram_id)
        if existing:
            return existing, False
        uid = self._next_id()
        user = User(uid, telegram_id, username, first_name, last_name)
        self.users[uid] = user
        return user, True

    async def get_user_by_telegram_id(self, telegram_id):
        return next((u for u in self.users.values() if u.telegram_id == telegram_id), None)

    async def set_notifications(self, user_id, enabled):
        self.users[user_id] = replace(self.users[user_id], notifications_enabled=enabled)

    async def get_active_notifiable_users(self):
        return [u for u in self.users.values() if u.is_active and u.notifications_enabled]

    # ---------- habits ----------

    def add_habit(self, user, name="Read", is_active=True):
        habit = Habit(id=self._next_id(), user_id=user.id, name=name, is_active=is_active)
        self.habits[habit.id] = habit
        return habit

    async def create_habit(self, user_id, name, description=None):
        habit = Habit(id=self._next_id(), user_id=user_id, name=name, description=description)
        self.habits[habit.id] = habit
        return habit

    async def get_trackable_habits(self, user_id):
        self._check(user_id)
        return [h for h in self.habits.values() if h.user_id == user_id and h.is_active]

    async def get_habit(self, habit_id):
        return self.habits.get(habit_id)

    async def deactivate_habit(self, habit_id, user_id):
        habit = self.habits.get(habit_id)
        if not habit or habit.user_id != user_id or not habit.is_active:
            return False
        self.habits[habit_id] = replace(habit, is_active=False)
        return True

    # ---------- entries ----------

    def add_entries(self, habit, days, completed=True):
        for day in days:
            self.entries[(habit.id, day)] = HabitEntry(habit.id, day, completed)

    async def upsert_habit_entry(self, habit_id, day, completed):
        entry = HabitEntry(habit_id, day, completed)
        self.entries[(habit_id, day)] = entry
        return entry

    async def get_habit_entries_in_range(self, habit_id, start, end):
        return sorted(
            (e for (hid, d), e in self.entries.items() if hid == habit_id and start <= d <= end),
            key=lambda e: e.date,
        )

    async def get_entries_for_date(self, user_id, day):
        active = {h.id for h in await self.get_trackable_habits(user_id)}
        return [e for (hid, d), e in self.entries.items() if hid in active and d == day]

    async def has_any_entry_for_date(self, user_id, day):
        return bool(await self.get_entries_for_date(user_id, day))

    # ---------- notifications ----------

    async def upsert_notification(self, user_id, day):
        self.calls.append(("upsert_notification", user_id, day))
        current = self.notifications.get((user_id, day)) or Notification(user_id, day)
        self.notifications[(user_id, day)] = current
        return current

    async def get_notification(self, user_id, day):
        return self.notifications.get((user_id, day))

    async def mark_notification_sent(self, user_id, day):
        key = (user_id, day)
        if key in self.notifications:
            self.notifications[key] = replace(self.notifications[key], sent=True, sent_at=_now())

    async def mark_notification_responded(self, user_id, day):
        current = self.notifications.get((user_id, day)) or Notification(user_id, day)
        self.notifications[(user_id, day)] = replace(current, responded=True, responded_at=_now())

    # ---------- weekly summaries ----------

    async def upsert_weekly_summary(self, user_id, week_start, week_end, summary_data):
        summary = WeeklySummary(user_id, week_start, week_end, summary_data, _now())
        self.summaries[(user_id, week_start)] = summary
        return summary


class FakeGateway:
    def __init__(self):
        self.reminders = []
        self.summaries = []
        self.failing_users = set()

    async def send_reminder(self, user, habits, day):
        if user.id in self.failing_users:
            raise GatewayError(f"blocked by user {user.telegram_id}")
        self.reminders.append((user.id, [h.id for h in habits], day))

    async def send_weekly_summary(self, user, stats):
        if user.id in self.failing_users:
            raise GatewayError(f"blocked by user {user.telegram_id}")
        self.summaries.append((user.id, stats))


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def gateway():
    return FakeGateway()
