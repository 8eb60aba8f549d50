import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from app.db import Base
from app.models.reschedule import RescheduleIntent
from app.utils.time import format_time


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    RESCHEDULE_REQUESTED = "RESCHEDULE_REQUESTED"


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    USER = "USER"


# statuses that still hold a slot
ACTIVE_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.RESCHEDULE_REQUESTED,
)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    date = Column(String(10), nullable=False)
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    purpose = Column(String, nullable=True)
    status = Column(Enum(BookingStatus, native_enum=False), nullable=False, default=BookingStatus.PENDING)
    created_by_role = Column(Enum(Role, native_enum=False), nullable=False)

    cancel_reason = Column(Text, nullable=True)
    reject_reason = Column(Text, nullable=True)

    # outstanding reschedule round; requested_by is set iff one exists
    reschedule_requested_by = Column(Integer, nullable=True)
    reschedule_requested_at = Column(DateTime, nullable=True)
    reschedule_room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    reschedule_date = Column(String(10), nullable=True)
    reschedule_start_minutes = Column(Integer, nullable=True)
    reschedule_end_minutes = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    room = relationship("Room", back_populates="bookings", foreign_keys=[room_id])

    __table_args__ = (
        Index("ix_bookings_room_date_start", "room_id", "date", "start_minutes"),
        Index("ix_bookings_status", "status"),
    )

    @property
    def start_time(self):
        return format_time(self.start_minutes)

    @property
    def end_time(self):
        return format_time(self.end_minutes)

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES

    @property
    def reschedule_intent(self):
        if self.reschedule_requested_by is None:
            return None
        return RescheduleIntent(
            room_id=self.reschedule_room_id,
            date=self.reschedule_date,
            start_minutes=self.reschedule_start_minutes,
            end_minutes=self.reschedule_end_minutes,
        )

    @property
    def reschedule(self):
        """Reschedule sub-record as exposed in API payloads."""
        if self.reschedule_requested_by is None:
            return None
        return {
            "requested_by": self.reschedule_requested_by,
            "requested_at": self.reschedule_requested_at,
            "room_id": self.reschedule_room_id,
            "date": self.reschedule_date,
            "start_time": format_time(self.reschedule_start_minutes) if self.reschedule_start_minutes is not None else None,
            "end_time": format_time(self.reschedule_end_minutes) if self.reschedule_end_minutes is not None else None,
        }


def reschedule_fields(requested_by=None, requested_at=None, intent=None):
    """Column values that store (or, called bare, clear) a reschedule record."""
    intent = intent or RescheduleIntent()
    return {
        "reschedule_requested_by": requested_by,
        "reschedule_requested_at": requested_at,
        "reschedule_room_id": intent.room_id,
        "reschedule_date": intent.date,
        "reschedule_start_minutes": intent.start_minutes,
        "reschedule_end_minutes": intent.end_minutes,
    }
