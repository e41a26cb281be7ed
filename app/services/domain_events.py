"""
Recording domain events alongside business writes.

Whether a failed append fails the business operation is a policy choice,
controlled by settings.EVENT_APPEND_REQUIRED.
"""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import StorageFailure
from app.services.event_store import EventStore

logger = logging.getLogger(__name__)


def serialize_payload(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, default=str, sort_keys=True)


def commit_with_event(db: Session, event_type: str, subject: str, payload: Dict[str, Any]) -> Optional[int]:
    """
    Commit the pending business changes in db and record an event for them.

    Required mode: the event joins the open transaction, so both commit or
    neither does, and StorageFailure reaches the caller.
    Best-effort mode: the business changes commit first; a failed append is
    logged and None is returned.
    """
    store = EventStore(db)
    data = serialize_payload(payload)

    if settings.EVENT_APPEND_REQUIRED:
        event_id = store.append(event_type, subject, data, commit=False)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageFailure("commit", str(e)) from e
        return event_id

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure("commit", str(e)) from e
    try:
        return store.append(event_type, subject, data)
    except StorageFailure as e:
        logger.error(f"[DOMAIN_EVENTS] {event_type} for {subject} was not recorded: {e}")
        return None
