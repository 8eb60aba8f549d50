from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ResolvedTarget:
    """Effective room/date/window of a reschedule request."""

    room_id: int
    date: str
    start_minutes: int
    end_minutes: int

    def is_on(self, room_id: int, date: str) -> bool:
        return self.room_id == room_id and self.date == date


@dataclass(frozen=True)
class RescheduleIntent:
    """Partial overrides requested for a booking.

    A field left as ``None`` means "keep the booking's current value".
    """

    room_id: Optional[int] = None
    date: Optional[str] = None
    start_minutes: Optional[int] = None
    end_minutes: Optional[int] = None

    def resolve(self, booking) -> ResolvedTarget:
        return ResolvedTarget(
            room_id=self.room_id if self.room_id is not None else booking.room_id,
            date=self.date if self.date is not None else booking.date,
            start_minutes=self.start_minutes if self.start_minutes is not None else booking.start_minutes,
            end_minutes=self.end_minutes if self.end_minutes is not None else booking.end_minutes,
        )
