from typing import Optional
from fastapi import APIRouter, Depends, Query
from app.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.dependencies import get_booking_lifecycle
from app.models.actor import Actor
from app.models.booking import BookingStatus, Role
from app.schemas.booking import BookingPage, BookingResponse, OptionalReasonBody, ReasonBody
from app.services.lifecycle import BookingLifecycle
from app.utils.auth import require_roles
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/bookings",
    tags=["admin"],
)

staff_only = require_roles(Role.ADMIN, Role.STAFF)


@router.get(
    "/",
    response_model=BookingPage,
    summary="List all bookings",
    description="Filtered, paginated list of every booking, newest first.",
)
def list_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    room_id: Optional[int] = None,
    user_id: Optional[int] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(staff_only),
):
    rows, pagination = lifecycle.list_bookings(
        actor,
        status=booking_status,
        room_id=room_id,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return {
        "bookings": [BookingResponse.model_validate(b) for b in rows],
        "pagination": pagination,
    }


@router.post("/{booking_id}/confirm", response_model=BookingResponse, summary="Confirm a pending booking")
def confirm_booking(
    booking_id: int,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(staff_only),
):
    logger.debug(f"{actor.role.value} {actor.user_id} confirming booking {booking_id}")
    return lifecycle.confirm_booking(actor, booking_id)


@router.post("/{booking_id}/reject", response_model=BookingResponse, summary="Reject a pending booking")
def reject_booking(
    booking_id: int,
    body: ReasonBody,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(staff_only),
):
    logger.debug(f"{actor.role.value} {actor.user_id} rejecting booking {booking_id}")
    return lifecycle.reject_booking(actor, booking_id, body.reason)


@router.post(
    "/{booking_id}/approve-reschedule",
    response_model=BookingResponse,
    summary="Approve a reschedule request",
    description="Move the booking to its requested room/date/window and confirm it.",
)
def approve_reschedule(
    booking_id: int,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(staff_only),
):
    logger.debug(f"{actor.role.value} {actor.user_id} approving reschedule of booking {booking_id}")
    return lifecycle.approve_reschedule(actor, booking_id)


@router.post(
    "/{booking_id}/reject-reschedule",
    response_model=BookingResponse,
    summary="Reject a reschedule request",
    description="Drop the reschedule request; the booking returns to CONFIRMED.",
)
def reject_reschedule(
    booking_id: int,
    body: Optional[OptionalReasonBody] = None,
    lifecycle: BookingLifecycle = Depends(get_booking_lifecycle),
    actor: Actor = Depends(staff_only),
):
    logger.debug(f"{actor.role.value} {actor.user_id} rejecting reschedule of booking {booking_id}")
    return lifecycle.reject_reschedule(actor, booking_id, body.reason if body else None)
