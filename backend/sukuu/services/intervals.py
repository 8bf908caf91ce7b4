"""Canonical integer intervals and the overlap predicate.

Wall-clock times become minutes since midnight and percentages become tenths
of a percent, so every comparison downstream is exact integer arithmetic.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Iterable

TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):([0-5]\d)")

PERCENT_SCALE = 10
_TENTH = Decimal("0.1")


class IntervalError(ValueError):
    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.fields = tuple(fields)

    def field_errors(self) -> dict[str, list[str]]:
        return {field: [self.message] for field in self.fields}


class InvalidFormat(IntervalError):
    """A bound could not be parsed (bad ``HH:MM`` string, non-number, out of range)."""


class InvalidRange(IntervalError):
    """Both bounds parsed but they are in the wrong order."""


class BoundaryPolicy(str, Enum):
    EXCLUSIVE_TOUCH = "EXCLUSIVE_TOUCH"
    INCLUSIVE_TOUCH = "INCLUSIVE_TOUCH"


class IntervalUnit(str, Enum):
    MINUTES = "minutes"
    TENTHS_OF_PERCENT = "tenths_of_percent"


@dataclass(frozen=True)
class Interval:
    start: int
    end: int
    inclusive_start: bool = True
    inclusive_end: bool = False

    def as_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "inclusiveStart": self.inclusive_start,
            "inclusiveEnd": self.inclusive_end,
        }


def parse_time(value: object, *, field: str = "time") -> int:
    if not isinstance(value, str):
        raise InvalidFormat("Time must be in HH:MM 24-hour format", [field])
    match = TIME_PATTERN.fullmatch(value)
    if match is None:
        raise InvalidFormat("Time must be in HH:MM 24-hour format", [field])
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_percentage(value: object, *, field: str = "percentage") -> int:
    """Return ``value`` in tenths of a percent, rounded half-up (``85.5`` -> ``855``)."""
    if isinstance(value, bool) or value is None:
        raise InvalidFormat("Percentage must be a number", [field])
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidFormat("Percentage must be a number", [field]) from exc
    if not number.is_finite():
        raise InvalidFormat("Percentage must be a number", [field])
    if number < 0 or number > 100:
        raise InvalidFormat("Percentage must be between 0 and 100", [field])
    return int(number.quantize(_TENTH, rounding=ROUND_HALF_UP) * PERCENT_SCALE)


def format_tenths(tenths: int) -> str:
    whole, fraction = divmod(tenths, PERCENT_SCALE)
    return f"{whole}" if fraction == 0 else f"{whole}.{fraction}"


def time_interval(start: object, end: object, *, start_field: str = "start", end_field: str = "end") -> Interval:
    start_minutes = parse_time(start, field=start_field)
    end_minutes = parse_time(end, field=end_field)
    if start_minutes >= end_minutes:
        raise InvalidRange("End time must be after start time", [end_field])
    return Interval(start_minutes, end_minutes, inclusive_start=True, inclusive_end=False)


def percentage_interval(
    minimum: object, maximum: object, *, start_field: str = "start", end_field: str = "end"
) -> Interval:
    low = parse_percentage(minimum, field=start_field)
    high = parse_percentage(maximum, field=end_field)
    # Grade bands are closed ranges; a single-point band (min == max) is allowed.
    if low > high:
        raise InvalidRange("Min percentage cannot be greater than max percentage", [start_field])
    return Interval(low, high, inclusive_start=True, inclusive_end=True)


def build_interval(
    unit: IntervalUnit, start: object, end: object, *, start_field: str = "start", end_field: str = "end"
) -> Interval:
    if unit is IntervalUnit.MINUTES:
        return time_interval(start, end, start_field=start_field, end_field=end_field)
    return percentage_interval(start, end, start_field=start_field, end_field=end_field)


def overlaps(a: Interval, b: Interval, policy: BoundaryPolicy = BoundaryPolicy.EXCLUSIVE_TOUCH) -> bool:
    if policy is BoundaryPolicy.INCLUSIVE_TOUCH:
        return a.start <= b.end and b.start <= a.end
    return max(a.start, b.start) < min(a.end, b.end)


def describe(interval: Interval, unit: IntervalUnit) -> str:
    if unit is IntervalUnit.MINUTES:
        return f"{format_minutes(interval.start)}-{format_minutes(interval.end)}"
    return f"{format_tenths(interval.start)}%-{format_tenths(interval.end)}%"
