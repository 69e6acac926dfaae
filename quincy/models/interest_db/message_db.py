from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Uuid
from datetime import datetime
from quincy.core.database import Base


class Message(Base):
    __tablename__ = "messages"

    # autoincrement id doubles as the append order
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    connection_id = Column(Uuid, ForeignKey("connections.id"), nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
