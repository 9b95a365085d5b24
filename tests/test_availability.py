import uuid

import pytest
from conftest import MONDAY, NOW, SATURDAY, make_property

from propertech_scheduling.core.exceptions import NotFoundError
from propertech_scheduling.services.availability_service import (
    AvailabilityService, generate_slots, is_bookable,
)


def test_weekday_has_nineteen_half_hour_slots():
    slots = generate_slots(MONDAY)
    assert len(slots) == 19
    assert slots[0] == "09:00"
    assert slots[1] == "09:30"
    assert slots[-1] == "18:00"


def test_weekend_has_no_slots():
    assert generate_slots(SATURDAY) == []


def test_is_bookable():
    assert is_bookable(MONDAY, "14:30")
    assert not is_bookable(MONDAY, "18:30")
    assert not is_bookable(MONDAY, "09:15")
    assert not is_bookable(SATURDAY, "10:00")


def test_free_property_has_every_slot(db, listing):
    service = AvailabilityService(db)
    assert service.available_slots(listing.id, MONDAY) == generate_slots(MONDAY)
    assert service.booked_slots(listing.id, MONDAY) == set()


def test_active_viewings_block_slots_and_cancelled_do_not(db, listing, tenant, manager, viewings):
    pending = viewings.request_viewing(listing.id, tenant, MONDAY, "10:00", now=NOW)
    confirmed = viewings.request_viewing(listing.id, tenant, MONDAY, "11:00", now=NOW)
    viewings.confirm_viewing(confirmed.id, manager, now=NOW)
    cancelled = viewings.request_viewing(listing.id, tenant, MONDAY, "12:00", now=NOW)
    viewings.cancel_viewing(cancelled.id, tenant, now=NOW)

    service = AvailabilityService(db)
    available = service.available_slots(listing.id, MONDAY)

    assert "10:00" not in available
    assert "11:00" not in available
    assert "12:00" in available
    assert len(available) == 17
    assert pending.status.value == "pending"


def test_bookings_on_other_properties_do_not_interfere(db, listing, manager, tenant, viewings):
    other = make_property(db, manager, name="Hillside Villas")
    viewings.request_viewing(other.id, tenant, MONDAY, "10:00", now=NOW)

    assert "10:00" in AvailabilityService(db).available_slots(listing.id, MONDAY)


def test_summary_reports_both_lists_in_slot_order(db, listing, tenant, viewings):
    viewings.request_viewing(listing.id, tenant, MONDAY, "15:00", now=NOW)
    viewings.request_viewing(listing.id, tenant, MONDAY, "09:30", now=NOW)

    summary = AvailabilityService(db).summary(listing.id, MONDAY)

    assert summary["date"] == MONDAY
    assert summary["bookedSlots"] == ["09:30", "15:00"]
    assert summary["availableSlots"][0] == "09:00"
    assert "09:30" not in summary["availableSlots"]


def test_summary_for_unknown_property_is_not_found(db):
    with pytest.raises(NotFoundError):
        AvailabilityService(db).summary(uuid.uuid4(), MONDAY)
