from pydantic import BaseModel, ConfigDict
from typing import Optional

class RoomResponse(BaseModel):
    id: int
    name: str
    capacity: int
    location: Optional[str] = None
    description: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
