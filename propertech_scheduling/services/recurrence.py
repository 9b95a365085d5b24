"""
Recurrence Engine

Computes the next due date of a recurring maintenance obligation.

A recurrence is one of four variants:
  Monthly(n)    every n months
  Quarterly(n)  every 3n months
  Yearly(n)     every n years
  Custom(days)  every n days

Month and year steps clamp to the last valid day of the target month, so
2024-01-31 + Monthly(1) is 2024-02-29 and 2024-02-29 + Yearly(1) is
2025-02-28. The computation is pure: no clock, no I/O.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from propertech_scheduling.core.exceptions import ValidationError
from propertech_scheduling.models.scheduled_maintenance import MaintenanceFrequency


def _check_interval(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"Interval must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class Monthly:
    months: int = 1

    def __post_init__(self):
        _check_interval(self.months)


@dataclass(frozen=True)
class Quarterly:
    quarters: int = 1

    def __post_init__(self):
        _check_interval(self.quarters)


@dataclass(frozen=True)
class Yearly:
    years: int = 1

    def __post_init__(self):
        _check_interval(self.years)


@dataclass(frozen=True)
class Custom:
    days: int

    def __post_init__(self):
        _check_interval(self.days)


Recurrence = Union[Monthly, Quarterly, Yearly, Custom]


def compute_next_due(current: date, recurrence: Recurrence) -> date:
    """Return the occurrence after ``current`` for ``recurrence``."""
    if isinstance(recurrence, Monthly):
        return current + relativedelta(months=recurrence.months)
    if isinstance(recurrence, Quarterly):
        return current + relativedelta(months=3 * recurrence.quarters)
    if isinstance(recurrence, Yearly):
        return current + relativedelta(years=recurrence.years)
    if isinstance(recurrence, Custom):
        return current + timedelta(days=recurrence.days)
    raise ValidationError(f"Unsupported recurrence: {recurrence!r}")


def recurrence_from(frequency, interval: int) -> Recurrence:
    """Build a recurrence from the persisted (frequency, interval) pair."""
    try:
        frequency = MaintenanceFrequency(frequency)
    except ValueError:
        raise ValidationError(f"Unknown frequency: {frequency!r}")

    if frequency == MaintenanceFrequency.MONTHLY:
        return Monthly(interval)
    if frequency == MaintenanceFrequency.QUARTERLY:
        return Quarterly(interval)
    if frequency == MaintenanceFrequency.YEARLY:
        return Yearly(interval)
    return Custom(interval)


def to_frequency(recurrence: Recurrence) -> tuple:
    """Inverse of recurrence_from: the (frequency, interval) pair to persist."""
    if isinstance(recurrence, Monthly):
        return MaintenanceFrequency.MONTHLY, recurrence.months
    if isinstance(recurrence, Quarterly):
        return MaintenanceFrequency.QUARTERLY, recurrence.quarters
    if isinstance(recurrence, Yearly):
        return MaintenanceFrequency.YEARLY, recurrence.years
    return MaintenanceFrequency.CUSTOM, recurrence.days


def describe(recurrence: Recurrence) -> str:
    """Human-readable cadence, e.g. "Every 2 months"."""
    frequency, n = to_frequency(recurrence)
    unit = {
        MaintenanceFrequency.MONTHLY: "month",
        MaintenanceFrequency.QUARTERLY: "quarter",
        MaintenanceFrequency.YEARLY: "year",
        MaintenanceFrequency.CUSTOM: "day",
    }[frequency]
    return f"Every {n} {unit}{'s' if n > 1 else ''}"
