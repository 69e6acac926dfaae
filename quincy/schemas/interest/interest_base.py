from pydantic import BaseModel, Field
from uuid import UUID
from typing import Literal, Optional
from datetime import datetime

from quincy.schemas.users.user_base import PublicProfileOut


class InterestCreate(BaseModel):
    receiver_id: UUID
    subject_id: Optional[UUID] = None


class InterestRespond(BaseModel):
    decision: Literal["accepted", "declined"]


class InterestOut(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    event_id: UUID
    subject_id: Optional[UUID] = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConnectionOut(BaseModel):
    id: UUID
    user_a: UUID
    user_b: UUID
    event_id: UUID
    created_at: datetime
    last_activity_at: datetime

    class Config:
        from_attributes = True


class InterestResultOut(BaseModel):
    interest: InterestOut
    created: bool
    matched: bool
    connection: Optional[ConnectionOut] = None


class ConnectionSummaryOut(BaseModel):
    connection: ConnectionOut
    other: PublicProfileOut
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)


class MessageOut(BaseModel):
    id: int
    connection_id: UUID
    sender_id: UUID
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
