import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, Uuid
from datetime import datetime
from quincy.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    starts_at = Column(DateTime, nullable=False)
    venue_name = Column(String, nullable=True)
    city = Column(String, nullable=True)

    # Only one meetup is live at a time; the earliest active one wins.
    is_active = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
