from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import List, Optional
from datetime import datetime


class UserBase(BaseModel):
    email: EmailStr
    username: str
    display_name: Optional[str] = None
    phone: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserOut(UserBase):
    id: UUID
    instagram_handle: Optional[str] = None
    music_identity: Optional[str] = None
    top_genres: Optional[List[str]] = None
    event_intent: Optional[str] = None
    onboarding_completed: bool = False
    vibe_card: str = ""
    created_at: datetime

    class Config:
        from_attributes = True


class PublicProfileOut(BaseModel):
    id: UUID
    display_name: Optional[str] = None
    vibe_card: str = ""

    class Config:
        from_attributes = True
