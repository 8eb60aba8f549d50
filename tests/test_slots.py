import pytest

from app.models.booking import BookingStatus
from app.models.reschedule import RescheduleIntent
from app.utils.scheduler import OverlapDetector
from app.utils.slots import SlotQueryService
from app.utils.time import parse_time
from tests.fakes import InMemoryBookingRepository, make_booking

DATE = "2025-06-01"


@pytest.fixture
def repo():
    return InMemoryBookingRepository()


@pytest.fixture
def slots(repo):
    return SlotQueryService(repo)


def as_tuples(result):
    return [(s.start, s.end, s.booking_id, s.status) for s in result]


def test_slots_sorted_by_start(repo, slots):
    late = make_booking(repo, start="14:00", end="15:00")
    early = make_booking(repo, start="08:00", end="08:30", status=BookingStatus.PENDING)
    make_booking(repo, start="10:00", end="11:00", status=BookingStatus.CANCELLED)
    make_booking(repo, start="11:00", end="12:00", status=BookingStatus.REJECTED)
    make_booking(repo, room_id=2, start="09:00", end="10:00")

    assert as_tuples(slots.get_booked_slots(1, DATE)) == [
        ("08:00", "08:30", early.id, BookingStatus.PENDING),
        ("14:00", "15:00", late.id, BookingStatus.CONFIRMED),
    ]


def test_rescheduling_booking_shows_only_its_target(repo, slots):
    booking = make_booking(
        repo,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(start_minutes=parse_time("11:00"), end_minutes=parse_time("12:00")),
    )
    assert as_tuples(slots.get_booked_slots(1, DATE)) == [
        ("11:00", "12:00", booking.id, BookingStatus.RESCHEDULE_REQUESTED),
    ]
    # the detector still holds the original slot
    assert OverlapDetector(repo).has_overlap(1, DATE, parse_time("09:00"), parse_time("10:00"))


def test_reschedule_target_in_other_room_appears_there(repo, slots):
    booking = make_booking(
        repo,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(room_id=2),
    )
    assert slots.get_booked_slots(1, DATE) == []
    assert as_tuples(slots.get_booked_slots(2, DATE)) == [
        ("09:00", "10:00", booking.id, BookingStatus.RESCHEDULE_REQUESTED),
    ]


def test_empty_day(slots):
    assert slots.get_booked_slots(1, DATE) == []
