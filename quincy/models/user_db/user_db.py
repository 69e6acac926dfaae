import uuid
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Uuid
from quincy.core.database import Base
from quincy.services.music_profile import generate_vibe_card
from datetime import datetime


class User(Base):
    __tablename__ = "users"

    id = Column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        index=True
    )

    email = Column(String, unique=True, nullable=False)
    username = Column(String, unique=True, nullable=False)
    display_name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    instagram_handle = Column(String, nullable=True)

    # onboarding answers
    music_identity = Column(String, nullable=True)
    top_genres = Column(JSON, default=list)  # ex: ["house", "jazz"]
    event_intent = Column(String, nullable=True)
    onboarding_completed = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def vibe_card(self) -> str:
        return generate_vibe_card(self)
