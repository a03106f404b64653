"""ISO date-time arithmetic, truncation and field extraction.

Every date function accepts an optional leading path, operates per element
when given an array and yields null for elements that are not text.
Conversions between local and offset date-times use the context zone.
"""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import datetime, timedelta, tzinfo

from treepath.query_language.ast import Value
from treepath.query_language.errors import QueryArgumentError
from treepath.query_language.functions.params import (
    map_text_values,
    navigate,
    optional_path_target,
    param_as_int,
    split_path_and_params,
)
from treepath.query_language.registry import FunctionImpl, FunctionRegistry
from treepath.query_language.runtime import EvalContext


type Shift = Callable[[datetime, int], datetime]
type Adjust = Callable[[datetime], datetime]

ONE_TICK = timedelta(microseconds=1)


def parse_datetime(text: str) -> datetime:
    """Parse ISO date-time text, with or without an offset."""
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError as exc:
        raise QueryArgumentError(f"Invalid date-time text: {text!r}") from exc


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month."""
    total = moment.year * 12 + moment.month - 1 + months
    year, month = divmod(total, 12)
    day = min(moment.day, calendar.monthrange(year, month + 1)[1])
    return moment.replace(year=year, month=month + 1, day=day)


def with_month(moment: datetime, month: int) -> datetime:
    day = min(moment.day, calendar.monthrange(moment.year, month)[1])
    return moment.replace(month=month, day=day)


def with_year(moment: datetime, year: int) -> datetime:
    day = min(moment.day, calendar.monthrange(year, moment.month)[1])
    return moment.replace(year=year, day=day)


def with_day_of_year(moment: datetime, day: int) -> datetime:
    length = 366 if calendar.isleap(moment.year) else 365
    if not 1 <= day <= length:
        raise ValueError(f"day of year must be in 1..{length}")
    return moment.replace(month=1, day=1) + timedelta(days=day - 1)


def to_offset(moment: datetime, zone: tzinfo) -> datetime:
    """Attach zone to a local date-time."""
    if moment.tzinfo is not None:
        raise QueryArgumentError(f"Expected a local date-time: {moment.isoformat()!r}")
    return moment.replace(tzinfo=zone)


def to_local(moment: datetime, zone: tzinfo) -> datetime:
    """Convert an offset date-time to the local time of zone."""
    if moment.tzinfo is None:
        raise QueryArgumentError(f"Expected a date-time with offset: {moment.isoformat()!r}")
    return moment.astimezone(zone).replace(tzinfo=None)


_SHIFTS: dict[str, Shift] = {
    "Seconds": lambda moment, amount: moment + timedelta(seconds=amount),
    "Minutes": lambda moment, amount: moment + timedelta(minutes=amount),
    "Hours": lambda moment, amount: moment + timedelta(hours=amount),
    "Days": lambda moment, amount: moment + timedelta(days=amount),
    "Weeks": lambda moment, amount: moment + timedelta(weeks=amount),
    "Months": add_months,
    "Years": lambda moment, amount: add_months(moment, amount * 12),
}

_WITHS: dict[str, Shift] = {
    "Second": lambda moment, value: moment.replace(second=value),
    "Minute": lambda moment, value: moment.replace(minute=value),
    "Hour": lambda moment, value: moment.replace(hour=value),
    "Day": lambda moment, value: moment.replace(day=value),
    "DayOfYear": with_day_of_year,
    "Month": with_month,
    "Year": with_year,
}

_TRUNCATIONS: dict[str, Adjust] = {
    "Second": lambda moment: moment.replace(microsecond=0),
    "Minute": lambda moment: moment.replace(second=0, microsecond=0),
    "Hour": lambda moment: moment.replace(minute=0, second=0, microsecond=0),
    "Day": lambda moment: moment.replace(hour=0, minute=0, second=0, microsecond=0),
    "Month": lambda moment: moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0),
    "Year": lambda moment: moment.replace(
        month=1, day=1, hour=0, minute=0, second=0, microsecond=0
    ),
}

# Last representable instant of the enclosing period.
_ENDS: dict[str, Adjust] = {
    "dayEnd": lambda moment: _TRUNCATIONS["Day"](moment) + timedelta(days=1) - ONE_TICK,
    "monthEnd": lambda moment: add_months(_TRUNCATIONS["Month"](moment), 1) - ONE_TICK,
    "yearEnd": lambda moment: add_months(_TRUNCATIONS["Year"](moment), 12) - ONE_TICK,
}

_FIELDS: dict[str, Callable[[datetime], Value]] = {
    "second": lambda moment: moment.second,
    "minute": lambda moment: moment.minute,
    "hour": lambda moment: moment.hour,
    "day": lambda moment: moment.day,
    "month": lambda moment: moment.month,
    "year": lambda moment: moment.year,
    "dayOfWeek": lambda moment: moment.isoweekday(),
    "amPmOfDay": lambda moment: "AM" if moment.hour < 12 else "PM",
    "lengthOfMonth": lambda moment: calendar.monthrange(moment.year, moment.month)[1],
    "lengthOfYear": lambda moment: 366 if calendar.isleap(moment.year) else 365,
}


def _checked(name: str, text: str, adjust: Adjust) -> str:
    try:
        return adjust(parse_datetime(text)).isoformat()
    except (ValueError, OverflowError) as exc:
        raise QueryArgumentError(f"{name}() cannot adjust {text!r}: {exc}") from exc


def _amount_function(name: str, shift: Shift, sign: int = 1) -> FunctionImpl:
    """Build a function taking `([path,] amount)`."""

    def impl(node: Value, params: list[str], context: EvalContext) -> Value:
        path, rest = split_path_and_params(params, 1)
        target = navigate(node, path, context)
        amount = sign * param_as_int(node, rest[0], context)
        return map_text_values(
            target, lambda text: _checked(name, text, lambda moment: shift(moment, amount))
        )

    return impl


def _adjust_function(name: str, adjust: Adjust) -> FunctionImpl:
    """Build a function taking an optional path."""

    def impl(node: Value, params: list[str], context: EvalContext) -> Value:
        target = optional_path_target(node, params, context)
        return map_text_values(target, lambda text: _checked(name, text, adjust))

    return impl


def _field_function(extract: Callable[[datetime], Value]) -> FunctionImpl:
    def impl(node: Value, params: list[str], context: EvalContext) -> Value:
        target = optional_path_target(node, params, context)
        return map_text_values(target, lambda text: extract(parse_datetime(text)))

    return impl


def func_local_to_offset_date(node: Value, params: list[str], context: EvalContext) -> Value:
    target = optional_path_target(node, params, context)
    return map_text_values(
        target, lambda text: to_offset(parse_datetime(text), context.zone).isoformat()
    )


def func_offset_to_local_date(node: Value, params: list[str], context: EvalContext) -> Value:
    target = optional_path_target(node, params, context)
    return map_text_values(
        target, lambda text: to_local(parse_datetime(text), context.zone).isoformat()
    )


def register(registry: FunctionRegistry) -> None:
    """Register date functions."""
    for unit, shift in _SHIFTS.items():
        for prefix, sign in (("plus", 1), ("minus", -1)):
            name = f"{prefix}{unit}"
            registry.register(
                name, _amount_function(name, shift, sign), min_args=1, max_args=2, array_aware=True
            )
    for unit, shift in _WITHS.items():
        name = f"with{unit}"
        registry.register(
            name, _amount_function(name, shift), min_args=1, max_args=2, array_aware=True
        )
    for unit, truncate in _TRUNCATIONS.items():
        name = f"truncateTo{unit}"
        registry.register(name, _adjust_function(name, truncate), max_args=1, array_aware=True)
    for name, end in _ENDS.items():
        registry.register(name, _adjust_function(name, end), max_args=1, array_aware=True)
    for name, extract in _FIELDS.items():
        registry.register(name, _field_function(extract), max_args=1, array_aware=True)
    registry.register(
        "localToOffsetDate", func_local_to_offset_date, max_args=1, array_aware=True
    )
    registry.register(
        "offsetToLocalDate", func_offset_to_local_date, max_args=1, array_aware=True
    )
