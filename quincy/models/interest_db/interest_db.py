import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from datetime import datetime
from quincy.core.database import Base


class Interest(Base):
    __tablename__ = "interests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    subject_id = Column(Uuid, ForeignKey("vinyl_records.id"), nullable=True)

    status = Column(String, nullable=False, default="pending")  # pending | accepted | declined
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("sender_id", "receiver_id", "event_id", name="unique_directed_interest"),
        CheckConstraint("sender_id <> receiver_id", name="no_self_interest"),
    )
