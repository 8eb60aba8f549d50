from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query, status
from app.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.dependencies import get_booking_lifecycle
from app.models.actor import Actor
from app.models.booking import BookingStatus
from app.schemas.booking import (
    BookingCreate,
    BookingPage,
    BookingResponse,
    BookingUpdate,
    ReasonBody,
    RescheduleCreate,
)
from app.services.lifecycle import BookingLifecycle
from app.utils.auth import get_current_actor
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Request a room for a time window on a given date. The booking starts as PENDING.",
)
def create_booking(
    booking: BookingCreate,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create a new booking request.
    Requires authentication. Admin and staff may book on behalf of another user.

    - **room_id**: ID of the room to book.
    - **date**: Day of the booking (YYYY-MM-DD).
    - **start_time** / **end_time**: Window in HH:MM, at least 30 minutes long.
    - **purpose**: Purpose of the booking.
    - **user_id**: (Admin/staff only) user the booking is made for.
    """
    logger.debug(f"Creating booking for user {actor.user_id}, room_id: {booking.room_id}, date: {booking.date}")
    return lifecycle.create_booking(
        actor,
        room_id=booking.room_id,
        date=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        purpose=booking.purpose,
        user_id=booking.user_id,
    )


@router.get(
    "/",
    response_model=BookingPage,
    summary="List my bookings",
    description="Paginated list of the caller's upcoming or past bookings.",
)
def get_my_bookings(
    scope: Literal["upcoming", "history"] = "upcoming",
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Retrieve the caller's bookings.

    - **scope**: `upcoming` (today onwards, active only) or `history` (past days).
    - **status**: Only bookings with this status.
    - **from** / **to**: Date bounds (YYYY-MM-DD).
    - **page** / **limit**: Pagination.
    """
    rows, pagination = lifecycle.list_own_bookings(
        actor,
        scope=scope,
        status=booking_status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    logger.debug(f"Retrieved {len(rows)} of {pagination['total']} bookings for user {actor.user_id}")
    return {
        "bookings": [BookingResponse.model_validate(b) for b in rows],
        "pagination": pagination,
    }


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
    description="Retrieve a specific booking. Users only see their own bookings.",
)
def get_booking(
    booking_id: int,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    return lifecycle.get_booking(actor, booking_id)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Edit a pending booking",
    description="Change the date, window or purpose of a booking that is still PENDING.",
)
def update_booking(
    booking_id: int,
    booking_update: BookingUpdate,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Edit a pending booking.
    Requires ownership, or the admin/staff role.

    - **booking_id**: ID of the booking to update.
    - **date**: (Optional) New date.
    - **start_time** / **end_time**: (Optional) New window.
    - **purpose**: (Optional) New purpose.
    """
    logger.debug(f"User {actor.user_id} editing booking {booking_id}")
    return lifecycle.edit_booking(
        actor,
        booking_id,
        date=booking_update.date,
        start_time=booking_update.start_time,
        end_time=booking_update.end_time,
        purpose=booking_update.purpose,
    )


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
    description="Cancel a booking with a reason. Cancelling twice is an error.",
)
def cancel_booking(
    booking_id: int,
    body: ReasonBody,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    logger.debug(f"User {actor.user_id} cancelling booking {booking_id}")
    return lifecycle.cancel_booking(actor, booking_id, body.reason)


@router.post(
    "/{booking_id}/reschedule",
    response_model=BookingResponse,
    summary="Request a reschedule",
    description="Ask for a new room, date or window. Admin or staff must approve it.",
)
def request_reschedule(
    booking_id: int,
    body: RescheduleCreate,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Request a reschedule for a pending or confirmed booking.
    Omitted fields keep the booking's current value.

    - **room_id**: (Optional) Target room.
    - **date**: (Optional) Target date.
    - **start_time** / **end_time**: (Optional) Target window.
    """
    logger.debug(f"User {actor.user_id} requesting reschedule of booking {booking_id}")
    return lifecycle.request_reschedule(
        actor,
        booking_id,
        room_id=body.room_id,
        date=body.date,
        start_time=body.start_time,
        end_time=body.end_time,
    )
