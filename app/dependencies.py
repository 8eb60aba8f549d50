from fastapi import Depends
from sqlalchemy.orm import Session
from app.db import get_db
from app.repository import SqlAlchemyBookingRepository, SqlAlchemyRoomRepository
from app.services.lifecycle import BookingLifecycle
from app.utils.scheduler import OverlapDetector
from app.utils.slots import SlotQueryService


def get_room_repository(db: Session = Depends(get_db)):
    return SqlAlchemyRoomRepository(db)


def get_booking_lifecycle(db: Session = Depends(get_db)):
    return BookingLifecycle(SqlAlchemyBookingRepository(db), SqlAlchemyRoomRepository(db))


def get_overlap_detector(db: Session = Depends(get_db)):
    return OverlapDetector(SqlAlchemyBookingRepository(db))


def get_slot_service(db: Session = Depends(get_db)):
    return SlotQueryService(SqlAlchemyBookingRepository(db))
