from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from app.dependencies import get_overlap_detector, get_room_repository, get_slot_service
from app.errors import RoomNotFound
from app.repository import RoomRepository
from app.schemas.booking import BookedSlotResponse, OverlapResponse
from app.schemas.room import RoomResponse
from app.utils.auth import get_current_actor
from app.utils.scheduler import OverlapDetector
from app.utils.slots import SlotQueryService
from app.utils.time import parse_time, validate_date


router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def _existing_room(rooms: RoomRepository, room_id: int):
    room = rooms.get(room_id)
    if not room:
        raise RoomNotFound(details={"room_id": room_id})
    return room


@router.get("/", response_model=List[RoomResponse])
def get_rooms(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = False,
    rooms: RoomRepository = Depends(get_room_repository),
):
    """
    Retrieve a list of all meeting rooms.
    """
    return rooms.list(skip=skip, limit=limit, active_only=active_only)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, rooms: RoomRepository = Depends(get_room_repository)):
    """
    Retrieve a specific meeting room by ID.
    """
    return _existing_room(rooms, room_id)


@router.get("/{room_id}/booked-slots", response_model=List[BookedSlotResponse])
def get_booked_slots(
    room_id: int,
    date: str,
    rooms: RoomRepository = Depends(get_room_repository),
    slots: SlotQueryService = Depends(get_slot_service),
):
    """
    Booked intervals of a room on a date, ascending by start time.
    Requested reschedule targets are included and tagged RESCHEDULE_REQUESTED.
    """
    validate_date(date)
    _existing_room(rooms, room_id)
    return slots.get_booked_slots(room_id, date)


@router.get(
    "/{room_id}/overlap",
    response_model=OverlapResponse,
    dependencies=[Depends(get_current_actor)],
)
def check_overlap(
    room_id: int,
    date: str,
    start_time: str,
    end_time: str,
    exclude_booking_id: Optional[int] = Query(None),
    rooms: RoomRepository = Depends(get_room_repository),
    detector: OverlapDetector = Depends(get_overlap_detector),
):
    """
    Check whether a window is already held in a room.
    Advisory only; every booking write re-checks.
    """
    validate_date(date)
    start_minutes = parse_time(start_time)
    end_minutes = parse_time(end_time)
    _existing_room(rooms, room_id)
    return {"overlap": detector.has_overlap(room_id, date, start_minutes, end_minutes, exclude_booking_id)}
