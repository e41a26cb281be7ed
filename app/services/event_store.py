"""
Event store backed by the event_store table.

Records domain events (UserCreated, RoleAssigned, ...) for asynchronous
processing. Each record tracks whether it has been processed, how many
processing attempts were reported and the last error. Consumers pull
batches with scan_unprocessed / claim_unprocessed and report each attempt
back with mark_processed.

Delivery is at-least-once: nothing here prevents the same record from being
handed to a consumer more than once.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import case, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import StorageFailure
from app.models.event_record import EventRecord, EventStatus

logger = logging.getLogger(__name__)


class EventStore:
    """
    Append/scan access to event records over an injected session.

    The session is owned by the caller (request dependency or session_scope);
    the store commits its own writes unless asked to join the caller's
    transaction.
    """

    def __init__(
        self,
        db: Session,
        max_attempts: Optional[int] = None,
        claim_timeout_seconds: Optional[int] = None,
    ):
        self.db = db
        self.max_attempts = settings.EVENT_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.claim_timeout_seconds = (
            settings.EVENT_CLAIM_TIMEOUT_SECONDS if claim_timeout_seconds is None else claim_timeout_seconds
        )
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")
        if self.claim_timeout_seconds < 1:
            raise ValueError("claim_timeout_seconds must be a positive integer")

    def append(self, event_type: str, subject: str, data: str, commit: bool = True) -> int:
        """
        Append a new pending record and return its event_id.

        With commit=False the record is only flushed, so it becomes part of
        the caller's open transaction and is committed or rolled back with it.
        """
        if not event_type or not event_type.strip():
            raise ValueError("event_type is required")
        if not subject or not subject.strip():
            raise ValueError("subject is required")
        if data is None:
            raise ValueError("data is required")

        record = EventRecord(
            event_type=event_type,
            subject=subject,
            data=data,
            event_time=datetime.utcnow(),
            processed=False,
            attempts=0,
            status=EventStatus.PENDING.value,
        )
        try:
            self.db.add(record)
            self.db.flush()
            event_id = record.event_id
            if commit:
                self.db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"[EVENT_STORE] Failed to append event {event_type}")
            self.db.rollback()
            raise StorageFailure("append", str(e)) from e

        logger.info(f"[EVENT_STORE] Event {event_type} stored with id {event_id}")
        return event_id

    def mark_processed(self, event_id: int, success: bool, error_message: Optional[str] = None) -> bool:
        """
        Report the outcome of one processing attempt.

        Sets processed to the outcome, stamps process_time, increments
        attempts by one and overwrites error_message (cleared on success).
        The increment happens in a single UPDATE so concurrent reports never
        lose an attempt.

        Returns False when no record has this id.
        """
        if not success and not error_message:
            raise ValueError("error_message is required when success is False")

        if success:
            error_message = None
            status = EventStatus.PROCESSED.value
        else:
            status = case(
                (EventRecord.attempts + 1 >= self.max_attempts, EventStatus.EXHAUSTED.value),
                else_=EventStatus.PENDING.value,
            )

        stmt = (
            update(EventRecord)
            .where(EventRecord.event_id == event_id)
            .values(
                processed=success,
                process_time=datetime.utcnow(),
                attempts=EventRecord.attempts + 1,
                error_message=error_message,
                status=status,
                claimed_by=None,
                claimed_at=None,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"[EVENT_STORE] Failed to update event {event_id}")
            self.db.rollback()
            raise StorageFailure("mark_processed", str(e)) from e

        if result.rowcount == 0:
            logger.warning(f"[EVENT_STORE] Event {event_id} not found, nothing marked")
            return False

        logger.info(f"[EVENT_STORE] Event {event_id} marked as {'processed' if success else 'failed'}")
        return True

    def scan_unprocessed(self, max_attempts: Optional[int] = None, limit: Optional[int] = None) -> List[EventRecord]:
        """
        Unprocessed records with attempts below max_attempts, oldest first,
        at most limit of them. Read-only: nothing is marked or locked.
        """
        max_attempts, limit = self._bounds(max_attempts, limit)
        stmt = (
            select(EventRecord)
            .where(
                EventRecord.processed.is_(False),
                EventRecord.attempts < max_attempts,
            )
            .order_by(EventRecord.event_time.asc(), EventRecord.event_id.asc())
            .limit(limit)
        )
        return self._fetch("scan_unprocessed", stmt)

    def claim_unprocessed(
        self,
        consumer_id: str,
        max_attempts: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[EventRecord]:
        """
        Like scan_unprocessed, but stamps claimed_by/claimed_at on the returned
        records so other consumers skip them until the claim goes stale or
        mark_processed releases it. Rows are selected with FOR UPDATE SKIP
        LOCKED where the database supports it.
        """
        if not consumer_id:
            raise ValueError("consumer_id is required")
        max_attempts, limit = self._bounds(max_attempts, limit)
        now = datetime.utcnow()
        stale_before = now - timedelta(seconds=self.claim_timeout_seconds)

        stmt = (
            select(EventRecord)
            .where(
                EventRecord.processed.is_(False),
                EventRecord.attempts < max_attempts,
                or_(EventRecord.claimed_at.is_(None), EventRecord.claimed_at < stale_before),
            )
            .order_by(EventRecord.event_time.asc(), EventRecord.event_id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        try:
            records = list(self.db.scalars(stmt).all())
            for record in records:
                record.claimed_by = consumer_id
                record.claimed_at = now
            self.db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"[EVENT_STORE] Failed to claim events for {consumer_id}")
            self.db.rollback()
            raise StorageFailure("claim_unprocessed", str(e)) from e

        if records:
            logger.info(f"[EVENT_STORE] {consumer_id} claimed {len(records)} event(s)")
        return records

    def scan_exhausted(self, max_attempts: Optional[int] = None, limit: Optional[int] = None) -> List[EventRecord]:
        """Unprocessed records that reached the retry cutoff (poison messages)."""
        max_attempts, limit = self._bounds(max_attempts, limit)
        stmt = (
            select(EventRecord)
            .where(
                EventRecord.processed.is_(False),
                EventRecord.attempts >= max_attempts,
            )
            .order_by(EventRecord.event_time.asc(), EventRecord.event_id.asc())
            .limit(limit)
        )
        return self._fetch("scan_exhausted", stmt)

    def get(self, event_id: int) -> Optional[EventRecord]:
        try:
            return self.db.get(EventRecord, event_id)
        except SQLAlchemyError as e:
            logger.exception(f"[EVENT_STORE] Failed to load event {event_id}")
            self.db.rollback()
            raise StorageFailure("get", str(e)) from e

    def _bounds(self, max_attempts: Optional[int], limit: Optional[int]):
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        limit = settings.EVENT_BATCH_SIZE if limit is None else limit
        if max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")
        if limit < 1:
            raise ValueError("limit must be a positive integer")
        return max_attempts, limit

    def _fetch(self, operation: str, stmt) -> List[EventRecord]:
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.exception(f"[EVENT_STORE] {operation} failed")
            self.db.rollback()
            raise StorageFailure(operation, str(e)) from e
