from sqlalchemy.orm import relationship
from sqlalchemy import Boolean, Column, Integer, String, Text
from app.db import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, unique=True, nullable=False)
    capacity = Column(Integer, nullable=False)
    location = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    bookings = relationship(
        "Booking", back_populates="room", foreign_keys="Booking.room_id"
    )
