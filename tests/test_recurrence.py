from datetime import date

import pytest

from propertech_scheduling.core.exceptions import ValidationError
from propertech_scheduling.models.scheduled_maintenance import MaintenanceFrequency
from propertech_scheduling.services.recurrence import (
    Custom, Monthly, Quarterly, Yearly, compute_next_due, describe, recurrence_from, to_frequency,
)


def test_monthly_clamps_to_leap_day():
    assert compute_next_due(date(2024, 1, 31), Monthly(1)) == date(2024, 2, 29)


def test_monthly_clamps_in_common_year():
    assert compute_next_due(date(2023, 1, 31), Monthly(1)) == date(2023, 2, 28)


def test_monthly_keeps_day_when_valid():
    assert compute_next_due(date(2024, 3, 15), Monthly(2)) == date(2024, 5, 15)


def test_chained_completion_starts_from_stored_value():
    first = compute_next_due(date(2024, 1, 31), Monthly(1))
    second = compute_next_due(first, Monthly(1))
    assert (first, second) == (date(2024, 2, 29), date(2024, 3, 29))


def test_quarterly_crosses_year_and_clamps():
    assert compute_next_due(date(2024, 11, 30), Quarterly(1)) == date(2025, 2, 28)


def test_quarterly_interval_multiplies_months():
    assert compute_next_due(date(2024, 1, 10), Quarterly(2)) == date(2024, 7, 10)


def test_yearly_from_leap_day():
    assert compute_next_due(date(2024, 2, 29), Yearly(1)) == date(2025, 2, 28)
    assert compute_next_due(date(2024, 2, 29), Yearly(4)) == date(2028, 2, 29)


def test_custom_adds_days_across_year_end():
    assert compute_next_due(date(2024, 12, 25), Custom(10)) == date(2025, 1, 4)


@pytest.mark.parametrize("last_due,recurrence,expected", [
    (date(2024, 1, 15), Monthly(1), date(2024, 2, 15)),
    (date(2024, 1, 1), Quarterly(1), date(2024, 4, 1)),
    (date(2024, 1, 1), Yearly(1), date(2025, 1, 1)),
    (date(2024, 1, 1), Custom(10), date(2024, 1, 11)),
])
def test_reference_cases(last_due, recurrence, expected):
    assert compute_next_due(last_due, recurrence) == expected


def test_compute_next_due_is_pure():
    last_due = date(2024, 1, 31)
    recurrence = Monthly(1)

    first = compute_next_due(last_due, recurrence)
    second = compute_next_due(last_due, recurrence)

    assert first == second == date(2024, 2, 29)
    assert recurrence == Monthly(1)
    assert last_due == date(2024, 1, 31)


@pytest.mark.parametrize("factory", [
    lambda: Monthly(0),
    lambda: Quarterly(-1),
    lambda: Yearly(0),
    lambda: Custom(0),
    lambda: Monthly(True),
])
def test_non_positive_interval_rejected(factory):
    with pytest.raises(ValidationError):
        factory()


def test_unknown_frequency_rejected():
    with pytest.raises(ValidationError):
        recurrence_from("weekly", 1)


def test_recurrence_from_persisted_pair():
    assert recurrence_from("quarterly", 2) == Quarterly(2)
    assert recurrence_from(MaintenanceFrequency.CUSTOM, 14) == Custom(14)
    assert to_frequency(Yearly(3)) == (MaintenanceFrequency.YEARLY, 3)


def test_recurrence_from_rejects_bad_interval():
    with pytest.raises(ValidationError):
        recurrence_from("monthly", 0)


def test_describe():
    assert describe(Monthly(2)) == "Every 2 months"
    assert describe(Quarterly(1)) == "Every 1 quarter"
    assert describe(Custom(1)) == "Every 1 day"
