import logging
from typing import Iterator, List, Optional, Tuple
from app.models.booking import ACTIVE_STATUSES, Booking
from app.repository import BookingRepository
from app.utils.time import intervals_overlap

logger = logging.getLogger(__name__)


class OverlapDetector:
    """
    Decide whether a room/date/window is already held.

    A slot is held by the own interval of every active booking (including one
    waiting on a reschedule, whose original slot stays held until the request is
    resolved) and by the resolved target of every outstanding reschedule request.
    """

    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def occupied_intervals(
        self, room_id: int, date: str, exclude_booking_id: Optional[int] = None
    ) -> Iterator[Tuple[Booking, int, int]]:
        # own-interval pass
        for booking in self.bookings.on_room_day(room_id, date, ACTIVE_STATUSES):
            if booking.id == exclude_booking_id:
                continue
            yield booking, booking.start_minutes, booking.end_minutes

        # reschedule-target pass
        for booking in self.bookings.rescheduling_into(room_id, date):
            intent = booking.reschedule_intent
            if booking.id == exclude_booking_id or intent is None:
                continue
            target = intent.resolve(booking)
            if target.is_on(room_id, date):
                yield booking, target.start_minutes, target.end_minutes

    def find_conflicts(
        self,
        room_id: int,
        date: str,
        start_minutes: int,
        end_minutes: int,
        exclude_booking_id: Optional[int] = None,
    ) -> List[Booking]:
        conflicts = []
        for booking, start, end in self.occupied_intervals(room_id, date, exclude_booking_id):
            if intervals_overlap(start, end, start_minutes, end_minutes) and booking not in conflicts:
                conflicts.append(booking)
        return conflicts

    def has_overlap(
        self,
        room_id: int,
        date: str,
        start_minutes: int,
        end_minutes: int,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        conflicts = self.find_conflicts(room_id, date, start_minutes, end_minutes, exclude_booking_id)
        if conflicts:
            logger.debug(
                f"Overlap in room {room_id} on {date} for {start_minutes}-{end_minutes}: "
                f"bookings {[b.id for b in conflicts]}"
            )
        return bool(conflicts)
