from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from datetime import datetime
from typing import List, Optional
from app.models.booking import BookingStatus, Role
from app.utils.validation_helpers import check_time_order, validate_date_field, validate_time_field


class BookingCreate(BaseModel):
    room_id: int
    date: str
    start_time: str
    end_time: str
    purpose: Optional[str] = None
    # staff may book on behalf of another user
    user_id: Optional[int] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return validate_date_field(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value):
        return validate_time_field(value)

    @model_validator(mode="after")
    def check_order(self):
        check_time_order(self.start_time, self.end_time)
        return self


class WindowChange(BaseModel):
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, value):
        return validate_date_field(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value):
        return validate_time_field(value)

    @model_validator(mode="after")
    def check_order(self):
        check_time_order(self.start_time, self.end_time)
        return self


class BookingUpdate(WindowChange):
    purpose: Optional[str] = None


class RescheduleCreate(WindowChange):
    room_id: Optional[int] = None


class ReasonBody(BaseModel):
    reason: str

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value):
        if not value.strip():
            raise ValueError("A reason is required")
        return value.strip()


class OptionalReasonBody(BaseModel):
    reason: Optional[str] = None


class RescheduleResponse(BaseModel):
    requested_by: int
    requested_at: datetime
    room_id: Optional[int] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    room_id: int
    user_id: int
    date: str
    start_time: str
    end_time: str
    purpose: Optional[str] = None
    status: BookingStatus
    created_by_role: Role
    reschedule: Optional[RescheduleResponse] = None
    cancel_reason: Optional[str] = None
    reject_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BookingPage(BaseModel):
    bookings: List[BookingResponse]
    pagination: Pagination


class BookedSlotResponse(BaseModel):
    start: str
    end: str
    booking_id: int
    status: BookingStatus

    model_config = ConfigDict(from_attributes=True)


class OverlapResponse(BaseModel):
    overlap: bool
