from pydantic import BaseModel, model_validator
from uuid import UUID
from typing import Optional
from datetime import datetime

from quincy.schemas.users.user_base import PublicProfileOut


class RecordCreate(BaseModel):
    album: Optional[str] = None
    artist: Optional[str] = None
    image_path: Optional[str] = None

    @model_validator(mode="after")
    def check_something_to_show(self):
        if not (self.album or self.artist or self.image_path):
            raise ValueError("Provide an album, an artist or a photo")
        return self


class RecordOut(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    typed_album: Optional[str] = None
    typed_artist: Optional[str] = None
    image_path: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DeckCardOut(BaseModel):
    record: RecordOut
    owner: PublicProfileOut
