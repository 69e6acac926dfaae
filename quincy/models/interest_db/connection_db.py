import uuid
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from datetime import datetime
from quincy.core.database import Base


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_a = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    user_b = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    last_activity_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        UniqueConstraint("user_a", "user_b", "event_id", name="unique_connection_pair"),
        CheckConstraint("user_a < user_b", name="canonical_connection_pair"),
    )

    def other_party(self, user_id):
        return self.user_b if self.user_a == user_id else self.user_a

    def involves(self, user_id) -> bool:
        return user_id in (self.user_a, self.user_b)
