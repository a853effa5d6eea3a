from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo


def parse_hhmm(value: str) -> time:
    """Parse a zero-padded "HH:MM" string."""
    hours, minutes = value.strip().split(":", 1)
    return time(int(hours), int(minutes))


def localize(moment: datetime, tz: tzinfo) -> datetime:
    """Attach the business timezone to naive datetimes, convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + timedelta(days=1)


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeRange":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    def intersects(self, other: "TimeRange") -> bool:
        # Half-open intervals: touching ranges do not overlap.
        return self.start < other.end and other.start < self.end

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class WorkingHours:
    start: time
    end: time

    def on(self, day: date, tz: tzinfo) -> TimeRange:
        return TimeRange(
            start=datetime.combine(day, self.start, tzinfo=tz),
            end=datetime.combine(day, self.end, tzinfo=tz),
        )

    def label(self) -> str:
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


@dataclass(frozen=True)
class LunchWindow:
    start: time = time(13, 0)
    end: time = time(14, 30)

    def on(self, day: date, tz: tzinfo) -> TimeRange:
        return TimeRange(
            start=datetime.combine(day, self.start, tzinfo=tz),
            end=datetime.combine(day, self.end, tzinfo=tz),
        )

    def label(self) -> str:
        return f"{self.start:%H:%M} - {self.end:%H:%M}"


@dataclass(frozen=True)
class WeeklySchedule:
    hours: dict[int, WorkingHours] = field(default_factory=dict)  # weekday() -> hours

    def for_day(self, day: date) -> WorkingHours | None:
        return self.hours.get(day.weekday())

    @classmethod
    def from_strings(cls, raw: dict[int, tuple[str, str] | None]) -> "WeeklySchedule":
        hours: dict[int, WorkingHours] = {}
        for weekday, window in raw.items():
            if not window:
                continue
            hours[weekday] = WorkingHours(start=parse_hhmm(window[0]), end=parse_hhmm(window[1]))
        return cls(hours=hours)
