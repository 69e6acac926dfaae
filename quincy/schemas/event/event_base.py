from pydantic import BaseModel
from uuid import UUID
from typing import Optional
from datetime import datetime


class EventOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    starts_at: datetime
    venue_name: Optional[str] = None
    city: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class RsvpOut(BaseModel):
    event_id: UUID
    user_id: UUID
    status: str
    created_at: datetime

    class Config:
        from_attributes = True
