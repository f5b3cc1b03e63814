from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone


@dataclass(frozen=True)
class DateWindow:
    start: date
    end: date

    def __contains__(self, day):
        return self.start <= day <= self.end

    def label(self):
        return f"{self.start:%b %d} - {self.end:%b %d, %Y}"


def local_now(tz, now=None) -> datetime:
    """Current wall-clock time in ``tz``. ``now`` must be aware when given."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(tz)


def reference_date(tz, now=None) -> date:
    return local_now(tz, now).date()


def week_window(reference: date, week_start: int = 0) -> DateWindow:
    """Calendar week containing ``reference``; ``week_start`` is 0=Monday .. 6=Sunday."""
    offset = (reference.weekday() - week_start) % 7
    start = reference - timedelta(days=offset)
    return DateWindow(start, start + timedelta(days=6))


def lookback_window(reference: date, horizon: int) -> DateWindow:
    return DateWindow(reference - timedelta(days=horizon - 1), reference)


def covering(*windows) -> DateWindow:
    return DateWindow(min(w.start for w in windows), max(w.end for w in windows))
