from datetime import datetime

from app.errors import StorageUnavailable
from app.models.booking import Booking, BookingStatus, Role, reschedule_fields
from app.models.room import Room
from app.repository import BookingRepository, RoomRepository
from app.utils.time import parse_time


class InMemoryRoomRepository(RoomRepository):
    def __init__(self):
        self.rooms = {}

    def add_room(self, room_id, is_active=True, name=None):
        room = Room(id=room_id, name=name or f"Room {room_id}", capacity=8, is_active=is_active)
        self.rooms[room_id] = room
        return room

    def get(self, room_id):
        return self.rooms.get(room_id)

    def list(self, skip=0, limit=100, active_only=False):
        rooms = [r for r in self.rooms.values() if r.is_active or not active_only]
        return rooms[skip:skip + limit]


class InMemoryBookingRepository(BookingRepository):
    def __init__(self):
        self.rows = {}
        self._next_id = 1
        self.fail_writes = False

    def get(self, booking_id):
        return self.rows.get(booking_id)

    def on_room_day(self, room_id, date, statuses):
        statuses = set(statuses)
        found = [
            b for b in self.rows.values()
            if b.room_id == room_id and b.date == date and b.status in statuses
        ]
        return sorted(found, key=lambda b: b.start_minutes)

    def rescheduling_into(self, room_id, date):
        found = []
        for booking in self.rows.values():
            intent = booking.reschedule_intent
            if booking.status != BookingStatus.RESCHEDULE_REQUESTED or intent is None:
                continue
            if intent.resolve(booking).is_on(room_id, date):
                found.append(booking)
        return found

    def add(self, booking):
        if self.fail_writes:
            raise StorageUnavailable()
        booking.id = self._next_id
        self._next_id += 1
        self.rows[booking.id] = booking
        return booking

    def update(self, booking, changes):
        if self.fail_writes:
            raise StorageUnavailable()
        for key, value in changes.items():
            setattr(booking, key, value)
        return booking

    def search(self, query, skip=0, limit=100):
        rows = list(self.rows.values())
        if query.user_id is not None:
            rows = [b for b in rows if b.user_id == query.user_id]
        if query.room_id is not None:
            rows = [b for b in rows if b.room_id == query.room_id]
        if query.statuses:
            rows = [b for b in rows if b.status in query.statuses]
        if query.date_from:
            rows = [b for b in rows if b.date >= query.date_from]
        if query.date_to:
            rows = [b for b in rows if b.date <= query.date_to]
        if query.date_before:
            rows = [b for b in rows if b.date < query.date_before]
        if query.order == "date_asc":
            rows.sort(key=lambda b: (b.date, b.start_minutes))
        elif query.order == "date_desc":
            rows.sort(key=lambda b: (b.date, -b.start_minutes), reverse=True)
        else:
            rows.sort(key=lambda b: (b.created_at, b.id), reverse=True)
        return rows[skip:skip + limit], len(rows)


def make_booking(repo, room_id=1, date="2025-06-01", start="09:00", end="10:00",
                 status=BookingStatus.CONFIRMED, user_id=1, reschedule=None):
    """Insert a booking row directly, bypassing the lifecycle checks."""
    now = datetime(2025, 5, 1, 12, 0)
    booking = Booking(
        room_id=room_id,
        user_id=user_id,
        date=date,
        start_minutes=parse_time(start),
        end_minutes=parse_time(end),
        status=status,
        created_by_role=Role.USER,
        created_at=now,
        updated_at=now,
    )
    if reschedule is not None:
        for key, value in reschedule_fields(user_id, now, reschedule).items():
            setattr(booking, key, value)
    return repo.add(booking)
