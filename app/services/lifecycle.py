"""Booking lifecycle: every status transition and the checks guarding it.

Each public method takes the acting caller first and validates its role
before anything else. User errors are raised as ``BookingError`` subclasses
and never mutate state; the status change and its side-effect fields of a
transition are handed to the repository as one update.

Writers that bind a booking to a room/date/window run the overlap scan and
the write inside ``BookingRepository.serialize`` for the affected rooms.
Approving a reschedule re-runs the scan, which also catches requests that
went stale since they were filed.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from app.errors import (
    AlreadyCancelled,
    BookingNotFound,
    BookingOverlap,
    Forbidden,
    InvalidTimeRange,
    NoRescheduleRequest,
    NotConfirmable,
    NotEditable,
    NotRejectable,
    NotReschedulable,
    ReasonRequired,
    RoomInactive,
    RoomNotFound,
)
from app.models.actor import Actor
from app.models.booking import ACTIVE_STATUSES, Booking, BookingStatus, reschedule_fields
from app.models.reschedule import RescheduleIntent
from app.repository import BookingQuery, BookingRepository, RoomRepository
from app.utils.scheduler import OverlapDetector
from app.utils.time import parse_time, today, validate_date, validate_window

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _clean(text):
    if text is None:
        return None
    return text.strip() or None


def _required_reason(reason):
    reason = _clean(reason)
    if reason is None:
        raise ReasonRequired(details={"field": "reason"})
    return reason


def _optional_time(value):
    return parse_time(value) if value is not None else None


class BookingLifecycle:
    def __init__(self, bookings: BookingRepository, rooms: RoomRepository, clock=utcnow):
        self.bookings = bookings
        self.rooms = rooms
        self.detector = OverlapDetector(bookings)
        self.clock = clock

    # lookups

    def get_booking(self, actor: Actor, booking_id: int) -> Booking:
        """Fetch a booking; USER callers only ever see their own."""
        booking = self.bookings.get(booking_id)
        if booking is None or (not actor.is_staff and booking.user_id != actor.user_id):
            logger.debug(f"Booking {booking_id} not visible to user {actor.user_id}")
            raise BookingNotFound(details={"booking_id": booking_id})
        return booking

    def list_own_bookings(
        self,
        actor: Actor,
        scope: str = "upcoming",
        status: Optional[BookingStatus] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ):
        """
        Page through the caller's bookings.

        ``upcoming`` covers today onwards and only slot-holding statuses,
        soonest first; ``history`` covers past days, latest first. An explicit
        ``status`` or date bound overrides the scope defaults.
        """
        query = BookingQuery(user_id=actor.user_id)
        if scope == "upcoming":
            query.date_from = today()
            query.statuses = ACTIVE_STATUSES
            query.order = "date_asc"
        else:
            query.date_before = today()
            query.order = "date_desc"
        if date_from:
            query.date_from = validate_date(date_from)
            query.date_before = None
        if date_to:
            query.date_to = validate_date(date_to)
        if status:
            query.statuses = (status,)
        return self._page(query, page, limit)

    def list_bookings(
        self,
        actor: Actor,
        status: Optional[BookingStatus] = None,
        room_id: Optional[int] = None,
        user_id: Optional[int] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ):
        self._require_staff(actor, "list bookings")
        query = BookingQuery(
            user_id=user_id,
            room_id=room_id,
            statuses=(status,) if status else None,
            date_from=validate_date(date_from) if date_from else None,
            date_to=validate_date(date_to) if date_to else None,
        )
        return self._page(query, page, limit)

    def _page(self, query, page, limit):
        rows, total = self.bookings.search(query, skip=(page - 1) * limit, limit=limit)
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if limit else 0,
        }
        return rows, pagination

    # transitions

    def create_booking(
        self,
        actor: Actor,
        room_id: int,
        date: str,
        start_time: str,
        end_time: str,
        purpose: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Booking:
        owner_id = actor.user_id if user_id is None else user_id
        if owner_id != actor.user_id and not actor.is_staff:
            logger.warning(f"User {actor.user_id} tried to book on behalf of user {owner_id}")
            raise Forbidden()

        validate_date(date)
        start_minutes = parse_time(start_time)
        end_minutes = parse_time(end_time)
        validate_window(start_minutes, end_minutes)
        self._bookable_room(room_id)

        now = self.clock()
        booking = Booking(
            room_id=room_id,
            user_id=owner_id,
            date=date,
            start_minutes=start_minutes,
            end_minutes=end_minutes,
            purpose=_clean(purpose),
            status=BookingStatus.PENDING,
            created_by_role=actor.role,
            created_at=now,
            updated_at=now,
        )
        with self.bookings.serialize(room_id):
            self._ensure_free(room_id, date, start_minutes, end_minutes)
            booking = self.bookings.add(booking)

        logger.info(
            f"Booking {booking.id} created by {actor.role.value} {actor.user_id} "
            f"for room {room_id} on {date} {start_time}-{end_time}"
        )
        return booking

    def confirm_booking(self, actor: Actor, booking_id: int) -> Booking:
        self._require_staff(actor, "confirm bookings")
        booking = self.get_booking(actor, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise NotConfirmable(details={"status": booking.status.value})
        return self._commit(booking, {"status": BookingStatus.CONFIRMED}, "confirmed")

    def reject_booking(self, actor: Actor, booking_id: int, reason: str) -> Booking:
        self._require_staff(actor, "reject bookings")
        reason = _required_reason(reason)
        booking = self.get_booking(actor, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise NotRejectable(details={"status": booking.status.value})
        return self._commit(
            booking, {"status": BookingStatus.REJECTED, "reject_reason": reason}, "rejected"
        )

    def cancel_booking(self, actor: Actor, booking_id: int, reason: str) -> Booking:
        reason = _required_reason(reason)
        booking = self.get_booking(actor, booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled()
        changes = {"status": BookingStatus.CANCELLED, "cancel_reason": reason}
        changes.update(reschedule_fields())
        return self._commit(booking, changes, "cancelled")

    def request_reschedule(
        self,
        actor: Actor,
        booking_id: int,
        room_id: Optional[int] = None,
        date: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> Booking:
        intent = RescheduleIntent(
            room_id=room_id,
            date=validate_date(date) if date is not None else None,
            start_minutes=_optional_time(start_time),
            end_minutes=_optional_time(end_time),
        )
        booking = self.get_booking(actor, booking_id)
        if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            raise NotReschedulable(details={"status": booking.status.value})

        target = intent.resolve(booking)
        validate_window(target.start_minutes, target.end_minutes)
        self._bookable_room(target.room_id)

        changes = {"status": BookingStatus.RESCHEDULE_REQUESTED}
        changes.update(reschedule_fields(actor.user_id, self.clock(), intent))
        with self.bookings.serialize(booking.room_id, target.room_id):
            self._ensure_free(
                target.room_id,
                target.date,
                target.start_minutes,
                target.end_minutes,
                exclude_booking_id=booking.id,
            )
            return self._commit(booking, changes, "reschedule requested")

    def approve_reschedule(self, actor: Actor, booking_id: int) -> Booking:
        self._require_staff(actor, "approve reschedules")
        booking = self.get_booking(actor, booking_id)
        intent = booking.reschedule_intent
        if booking.status != BookingStatus.RESCHEDULE_REQUESTED or intent is None:
            raise NoRescheduleRequest()

        target = intent.resolve(booking)
        self._bookable_room(target.room_id)

        changes = {
            "room_id": target.room_id,
            "date": target.date,
            "start_minutes": target.start_minutes,
            "end_minutes": target.end_minutes,
            "status": BookingStatus.CONFIRMED,
        }
        changes.update(reschedule_fields())
        with self.bookings.serialize(booking.room_id, target.room_id):
            self._ensure_free(
                target.room_id,
                target.date,
                target.start_minutes,
                target.end_minutes,
                exclude_booking_id=booking.id,
            )
            return self._commit(booking, changes, "reschedule approved")

    def reject_reschedule(self, actor: Actor, booking_id: int, reason: Optional[str] = None) -> Booking:
        self._require_staff(actor, "reject reschedules")
        booking = self.get_booking(actor, booking_id)
        if booking.status != BookingStatus.RESCHEDULE_REQUESTED or booking.reschedule_intent is None:
            raise NoRescheduleRequest()

        # Always back to CONFIRMED, even when the booking was PENDING before the request.
        changes = {"status": BookingStatus.CONFIRMED}
        changes.update(reschedule_fields())
        reason = _clean(reason)
        if reason:
            changes["reject_reason"] = reason
        return self._commit(booking, changes, "reschedule rejected")

    def edit_booking(
        self,
        actor: Actor,
        booking_id: int,
        date: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        purpose: Optional[str] = None,
    ) -> Booking:
        new_date = validate_date(date) if date is not None else None
        new_start = _optional_time(start_time)
        new_end = _optional_time(end_time)
        if new_start is not None and new_end is not None and new_start >= new_end:
            raise InvalidTimeRange(details={"field": "end_time"})

        booking = self.get_booking(actor, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise NotEditable(details={"status": booking.status.value})

        changes = {}
        if purpose is not None:
            changes["purpose"] = _clean(purpose)
        if new_date is None and new_start is None and new_end is None:
            return self._commit(booking, changes, "edited")

        target_date = new_date if new_date is not None else booking.date
        start_minutes = new_start if new_start is not None else booking.start_minutes
        end_minutes = new_end if new_end is not None else booking.end_minutes
        validate_window(start_minutes, end_minutes)
        self._bookable_room(booking.room_id)

        changes.update(date=target_date, start_minutes=start_minutes, end_minutes=end_minutes)
        with self.bookings.serialize(booking.room_id):
            self._ensure_free(
                booking.room_id, target_date, start_minutes, end_minutes, exclude_booking_id=booking.id
            )
            return self._commit(booking, changes, "edited")

    # helpers

    def _require_staff(self, actor, action):
        if not actor.is_staff:
            logger.warning(f"User {actor.user_id} ({actor.role.value}) may not {action}")
            raise Forbidden()

    def _bookable_room(self, room_id):
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFound(details={"room_id": room_id})
        if not room.is_active:
            logger.warning(f"Room {room_id} is inactive")
            raise RoomInactive(details={"room_id": room_id})
        return room

    def _ensure_free(self, room_id, date, start_minutes, end_minutes, exclude_booking_id=None):
        if self.detector.has_overlap(room_id, date, start_minutes, end_minutes, exclude_booking_id):
            logger.warning(
                f"Rejected overlapping window in room {room_id} on {date}: {start_minutes}-{end_minutes}"
            )
            raise BookingOverlap(details={"room_id": room_id, "date": date})

    def _commit(self, booking, changes, event):
        changes["updated_at"] = self.clock()
        booking = self.bookings.update(booking, changes)
        logger.info(f"Booking {booking.id} {event} (status {booking.status.value})")
        return booking
