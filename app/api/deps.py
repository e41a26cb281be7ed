from fastapi import Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.services.event_store import EventStore


def get_event_store(db: Session = Depends(get_db)) -> EventStore:
    """Event store bound to the request's session"""
    return EventStore(db)
