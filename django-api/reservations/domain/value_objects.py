"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Self

CENTS = Decimal("0.01")
UNITS = Decimal("1")

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def quantize_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, half up."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_whole(amount: Decimal) -> Decimal:
    """Round to the nearest whole monetary unit, half up."""
    return Decimal(amount).quantize(UNITS, rounding=ROUND_HALF_UP)


def is_valid_time_string(value: object) -> bool:
    return isinstance(value, str) and _TIME_RE.match(value) is not None


def parse_time(value: str) -> time:
    """Parse an HH:MM string.

    Raises:
        ValueError: If the value is not a 24-hour HH:MM time.
    """
    if not is_valid_time_string(value):
        raise ValueError(f"Invalid time format: {value!r}")
    hours, minutes = value.split(":")
    return time(hour=int(hours), minute=int(minutes))


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class TimeWindow:
    """Same-day time interval, half-open: [start, end)."""

    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("End time must be after start time")

    @classmethod
    def from_strings(cls, start: str, end: str) -> Self:
        return cls(start=parse_time(start), end=parse_time(end))

    @property
    def duration_hours(self) -> Decimal:
        minutes = (self.end.hour * 60 + self.end.minute) - (
            self.start.hour * 60 + self.start.minute
        )
        return Decimal(minutes) / Decimal(60)

    def overlaps(self, other: "TimeWindow") -> bool:
        # Touching windows (end == other.start) do not overlap.
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("End date must not be before start date")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[date]:
        for offset in range(self.span_days):
            yield self.start + timedelta(days=offset)
