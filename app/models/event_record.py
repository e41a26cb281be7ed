from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Index
from datetime import datetime
import enum
from app.db.session import Base


class EventStatus(str, enum.Enum):
    """Processing state of an event record"""
    PENDING = "pending"
    PROCESSED = "processed"
    EXHAUSTED = "exhausted"  # Retry cutoff reached while still unprocessed


class EventRecord(Base):
    __tablename__ = "event_store"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String, nullable=False, index=True)  # UserCreated, RoleAssigned, ...
    subject = Column(String, nullable=False)  # users/create, users/roles/assign, ...
    data = Column(Text, nullable=False)  # Serialized payload, opaque to the store
    event_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    processed = Column(Boolean, default=False, nullable=False)
    process_time = Column(DateTime, nullable=True)
    attempts = Column(Integer, default=0, nullable=False)
    error_message = Column(Text, nullable=True)
    # Stored as plain string, values from EventStatus
    status = Column(String, default=EventStatus.PENDING.value, nullable=False, index=True)
    claimed_by = Column(String, nullable=True)
    claimed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_event_store_pending", "processed", "attempts", "event_time"),
        {"sqlite_autoincrement": True},  # ids are never reused
    )

    def __repr__(self):
        return f"<EventRecord(event_id={self.event_id}, event_type={self.event_type}, attempts={self.attempts}, processed={self.processed})>"
