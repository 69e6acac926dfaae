import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from datetime import datetime
from quincy.core.database import Base


class VinylRecord(Base):
    __tablename__ = "vinyl_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    typed_album = Column(String, nullable=True)
    typed_artist = Column(String, nullable=True)
    image_path = Column(String, nullable=True)  # storage key of the uploaded photo

    created_at = Column(DateTime, default=datetime.utcnow)
