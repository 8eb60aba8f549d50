from dataclasses import dataclass
from typing import List
from app.models.booking import BookingStatus
from app.repository import BookingRepository
from app.utils.time import format_time


@dataclass(frozen=True)
class BookedSlot:
    start_minutes: int
    end_minutes: int
    booking_id: int
    status: BookingStatus

    @property
    def start(self):
        return format_time(self.start_minutes)

    @property
    def end(self):
        return format_time(self.end_minutes)


class SlotQueryService:
    """Booked intervals of a room/date for calendars and client-side warnings.

    Only advisory: a booking waiting on a reschedule shows its requested slot
    here, while its original slot is still held by the overlap detector.
    """

    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def get_booked_slots(self, room_id: int, date: str) -> List[BookedSlot]:
        slots = [
            BookedSlot(b.start_minutes, b.end_minutes, b.id, b.status)
            for b in self.bookings.on_room_day(
                room_id, date, (BookingStatus.PENDING, BookingStatus.CONFIRMED)
            )
        ]

        for booking in self.bookings.rescheduling_into(room_id, date):
            intent = booking.reschedule_intent
            if intent is None:
                continue
            target = intent.resolve(booking)
            if target.is_on(room_id, date):
                slots.append(
                    BookedSlot(
                        target.start_minutes,
                        target.end_minutes,
                        booking.id,
                        BookingStatus.RESCHEDULE_REQUESTED,
                    )
                )

        return sorted(slots, key=lambda slot: (slot.start_minutes, slot.booking_id))
