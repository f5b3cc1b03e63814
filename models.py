from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class User:
    id: int
    telegram_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True
    notifications_enabled: bool = True

    @classmethod
    def from_record(cls, r):
        return cls(
            id=r["id"],
            telegram_id=r["telegram_id"],
            username=r["username"],
            first_name=r["first_name"],
            last_name=r["last_name"],
            is_active=r["is_active"],
            notifications_enabled=r["notifications_enabled"],
        )


@dataclass(frozen=True)
class Habit:
    id: int
    user_id: int
    name: str
    description: str | None = None
    is_active: bool = True

    @classmethod
    def from_record(cls, r):
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            name=r["name"],
            description=r["description"],
            is_active=r["is_active"],
        )


@dataclass(frozen=True)
class HabitEntry:
    habit_id: int
    date: date
    completed: bool

    @classmethod
    def from_record(cls, r):
        return cls(habit_id=r["habit_id"], date=r["date"], completed=r["completed"])


@dataclass(frozen=True)
class Notification:
    user_id: int
    date: date
    sent: bool = False
    sent_at: datetime | None = None
    responded: bool = False
    responded_at: datetime | None = None

    @classmethod
    def from_record(cls, r):
        return cls(
            user_id=r["user_id"],
            date=r["date"],
            sent=r["sent"],
            sent_at=r["sent_at"],
            responded=r["responded"],
            responded_at=r["responded_at"],
        )


@dataclass(frozen=True)
class WeeklySummary:
    user_id: int
    week_start: date
    week_end: date
    summary_data: str
    sent_at: datetime | None = None

    @classmethod
    def from_record(cls, r):
        return cls(
            user_id=r["user_id"],
            week_start=r["week_start"],
            week_end=r["week_end"],
            summary_data=r["summary_data"],
            sent_at=r["sent_at"],
        )
