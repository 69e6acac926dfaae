from typing import List, Optional
from pydantic import BaseModel, Field
from quincy.schemas.users.user_base import UserOut
from quincy.services.music_profile import MusicIdentity, Genre, EventIntent


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    user: UserOut
    token: str
    token_type: str = "bearer"


class OnboardingPayload(BaseModel):
    display_name: str = Field(min_length=1)
    music_identity: Optional[MusicIdentity] = None
    top_genres: List[Genre] = Field(default_factory=list, max_length=3)
    event_intent: Optional[EventIntent] = None
    instagram_handle: Optional[str] = None
