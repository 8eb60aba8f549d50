"""Storage seam for bookings and rooms.

The booking engine only talks to the abstract repositories below, so it can
run against SQLAlchemy in production and an in-memory fake in tests.
"""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import StorageUnavailable
from app.models.booking import Booking, BookingStatus
from app.models.room import Room

logger = logging.getLogger(__name__)


@dataclass
class BookingQuery:
    user_id: Optional[int] = None
    room_id: Optional[int] = None
    statuses: Optional[Tuple[BookingStatus, ...]] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    date_before: Optional[str] = None
    # "date_asc", "date_desc" or "created_desc"
    order: str = "created_desc"


class BookingRepository(ABC):
    @abstractmethod
    def get(self, booking_id: int) -> Optional[Booking]:
        ...

    @abstractmethod
    def on_room_day(self, room_id: int, date: str, statuses: Iterable[BookingStatus]) -> List[Booking]:
        """Bookings whose own room/date match and whose status is in ``statuses``."""

    @abstractmethod
    def rescheduling_into(self, room_id: int, date: str) -> List[Booking]:
        """RESCHEDULE_REQUESTED bookings whose resolved target is this room/date."""

    @abstractmethod
    def add(self, booking: Booking) -> Booking:
        ...

    @abstractmethod
    def update(self, booking: Booking, changes: dict) -> Booking:
        """Apply all ``changes`` to ``booking`` and persist them as one unit."""

    @abstractmethod
    def search(self, query: BookingQuery, skip: int = 0, limit: int = 100) -> Tuple[List[Booking], int]:
        ...

    @contextmanager
    def serialize(self, *room_ids: int):
        """Hold writers to the given rooms off until the enclosed write lands."""
        yield


class RoomRepository(ABC):
    @abstractmethod
    def get(self, room_id: int) -> Optional[Room]:
        ...

    @abstractmethod
    def list(self, skip: int = 0, limit: int = 100, active_only: bool = False) -> List[Room]:
        ...


def storage_guard(fn):
    """Turn driver failures into StorageUnavailable after rolling back."""

    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Storage failure in {type(self).__name__}.{fn.__name__}")
            raise StorageUnavailable() from exc

    return wrapper


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, db: Session):
        self.db = db

    @storage_guard
    def get(self, booking_id):
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    @storage_guard
    def on_room_day(self, room_id, date, statuses):
        return (
            self.db.query(Booking)
            .filter(
                Booking.room_id == room_id,
                Booking.date == date,
                Booking.status.in_(list(statuses)),
            )
            .order_by(Booking.start_minutes)
            .all()
        )

    @storage_guard
    def rescheduling_into(self, room_id, date):
        return (
            self.db.query(Booking)
            .filter(
                Booking.status == BookingStatus.RESCHEDULE_REQUESTED,
                Booking.reschedule_requested_by.isnot(None),
                func.coalesce(Booking.reschedule_room_id, Booking.room_id) == room_id,
                func.coalesce(Booking.reschedule_date, Booking.date) == date,
            )
            .all()
        )

    @storage_guard
    def add(self, booking):
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    @storage_guard
    def update(self, booking, changes):
        for key, value in changes.items():
            setattr(booking, key, value)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    @storage_guard
    def search(self, query, skip=0, limit=100):
        q = self.db.query(Booking)
        if query.user_id is not None:
            q = q.filter(Booking.user_id == query.user_id)
        if query.room_id is not None:
            q = q.filter(Booking.room_id == query.room_id)
        if query.statuses:
            q = q.filter(Booking.status.in_(list(query.statuses)))
        if query.date_from:
            q = q.filter(Booking.date >= query.date_from)
        if query.date_to:
            q = q.filter(Booking.date <= query.date_to)
        if query.date_before:
            q = q.filter(Booking.date < query.date_before)

        total = q.count()
        if query.order == "date_asc":
            q = q.order_by(Booking.date.asc(), Booking.start_minutes.asc())
        elif query.order == "date_desc":
            q = q.order_by(Booking.date.desc(), Booking.start_minutes.asc())
        else:
            q = q.order_by(Booking.created_at.desc(), Booking.id.desc())
        return q.offset(skip).limit(limit).all(), total

    @contextmanager
    def serialize(self, *room_ids):
        # Row locks on the room rows; SQLite ignores FOR UPDATE.
        ids = sorted({room_id for room_id in room_ids if room_id is not None})
        try:
            self.db.query(Room.id).filter(Room.id.in_(ids)).order_by(Room.id).with_for_update().all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Could not lock rooms {ids}")
            raise StorageUnavailable() from exc
        try:
            yield
        except Exception:
            self.db.rollback()
            raise


class SqlAlchemyRoomRepository(RoomRepository):
    def __init__(self, db: Session):
        self.db = db

    @storage_guard
    def get(self, room_id):
        return self.db.query(Room).filter(Room.id == room_id).first()

    @storage_guard
    def list(self, skip=0, limit=100, active_only=False):
        q = self.db.query(Room)
        if active_only:
            q = q.filter(Room.is_active.is_(True))
        return q.order_by(Room.id).offset(skip).limit(limit).all()
