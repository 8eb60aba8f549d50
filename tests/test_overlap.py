import itertools

import pytest

from app.models.booking import BookingStatus
from app.models.reschedule import RescheduleIntent
from app.utils.scheduler import OverlapDetector
from app.utils.time import parse_time
from tests.fakes import InMemoryBookingRepository, make_booking

DATE = "2025-06-01"


@pytest.fixture
def repo():
    return InMemoryBookingRepository()


@pytest.fixture
def detector(repo):
    return OverlapDetector(repo)


def window(start, end):
    return parse_time(start), parse_time(end)


def test_empty_room_has_no_overlap(detector):
    assert not detector.has_overlap(1, DATE, *window("09:00", "10:00"))


@pytest.mark.parametrize(
    "start, end, expected",
    [
        ("09:30", "10:30", True),
        ("08:30", "09:30", True),
        ("09:15", "09:45", True),
        ("08:00", "11:00", True),
        ("10:00", "11:00", False),
        ("08:00", "09:00", False),
    ],
)
def test_own_interval_overlap(repo, detector, start, end, expected):
    make_booking(repo, start="09:00", end="10:00")
    assert detector.has_overlap(1, DATE, *window(start, end)) is expected


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED])
def test_active_statuses_hold_the_slot(repo, detector, status):
    make_booking(repo, status=status)
    assert detector.has_overlap(1, DATE, *window("09:00", "10:00"))


@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.REJECTED])
def test_terminal_statuses_release_the_slot(repo, detector, status):
    make_booking(repo, status=status)
    assert not detector.has_overlap(1, DATE, *window("09:00", "10:00"))


def test_other_room_or_date_does_not_overlap(repo, detector):
    make_booking(repo, room_id=2)
    make_booking(repo, date="2025-06-02")
    assert not detector.has_overlap(1, DATE, *window("09:00", "10:00"))


def test_rescheduling_booking_holds_original_and_target(repo, detector):
    make_booking(
        repo,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(start_minutes=parse_time("11:00"), end_minutes=parse_time("12:00")),
    )
    assert detector.has_overlap(1, DATE, *window("09:00", "10:00"))
    assert detector.has_overlap(1, DATE, *window("11:30", "12:30"))
    assert not detector.has_overlap(1, DATE, *window("10:00", "11:00"))


def test_reschedule_target_in_another_room_is_held_there(repo, detector):
    make_booking(
        repo,
        room_id=1,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(room_id=2, date="2025-06-03"),
    )
    # target falls back to the booking's own window
    assert detector.has_overlap(2, "2025-06-03", *window("09:30", "10:30"))
    assert not detector.has_overlap(2, DATE, *window("09:30", "10:30"))
    # original slot still held until the request is resolved
    assert detector.has_overlap(1, DATE, *window("09:30", "10:30"))


def test_exclude_removes_booking_from_both_passes(repo, detector):
    booking = make_booking(
        repo,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(start_minutes=parse_time("11:00"), end_minutes=parse_time("12:00")),
    )
    assert not detector.has_overlap(1, DATE, *window("09:00", "10:00"), exclude_booking_id=booking.id)
    assert not detector.has_overlap(1, DATE, *window("11:00", "12:00"), exclude_booking_id=booking.id)


def test_exclude_of_unrelated_id_changes_nothing(repo, detector):
    make_booking(repo, start="09:00", end="10:00")
    other = make_booking(repo, room_id=2)
    for start, end in [("09:00", "10:00"), ("10:00", "11:00"), ("08:00", "09:30")]:
        w = window(start, end)
        assert detector.has_overlap(1, DATE, *w) == detector.has_overlap(1, DATE, *w, exclude_booking_id=other.id)
        assert detector.has_overlap(1, DATE, *w) == detector.has_overlap(1, DATE, *w, exclude_booking_id=9999)


def test_result_does_not_depend_on_insertion_order():
    slots = [("08:00", "09:00"), ("10:00", "11:30"), ("13:00", "14:00")]
    probes = [("07:00", "08:00"), ("08:30", "10:00"), ("11:30", "13:00"), ("13:30", "15:00"), ("09:00", "10:00")]
    answers = set()
    for order in itertools.permutations(slots):
        repo = InMemoryBookingRepository()
        for start, end in order:
            make_booking(repo, start=start, end=end)
        detector = OverlapDetector(repo)
        answers.add(tuple(detector.has_overlap(1, DATE, *window(s, e)) for s, e in probes))
    assert answers == {(False, True, False, True, False)}


def test_find_conflicts_lists_each_booking_once(repo, detector):
    booking = make_booking(
        repo,
        status=BookingStatus.RESCHEDULE_REQUESTED,
        reschedule=RescheduleIntent(start_minutes=parse_time("09:30"), end_minutes=parse_time("10:30")),
    )
    conflicts = detector.find_conflicts(1, DATE, *window("09:00", "11:00"))
    assert conflicts == [booking]
