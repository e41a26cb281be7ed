"""
Batch consumer for the event store.

Claims a batch of unprocessed events, hands each one to the handler
registered for its event_type and reports exactly one outcome per attempt
back to the store. Handlers raise to signal failure; the exception text
becomes the record's error_message.
"""
import json
import logging
import os
import socket
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from app.core.config import settings
from app.models.event_record import EventRecord
from app.services.event_store import EventStore

logger = logging.getLogger(__name__)

EventHandler = Callable[[EventRecord, Any], None]


class UnhandledEventType(Exception):
    pass


@dataclass
class ConsumerRunResult:
    claimed: int = 0
    succeeded: int = 0
    failed: int = 0


def default_consumer_id() -> str:
    return f"{socket.gethostname()}-{os.getpid()}"


class EventConsumer:
    def __init__(
        self,
        store: EventStore,
        consumer_id: Optional[str] = None,
        max_attempts: Optional[int] = None,
        batch_size: Optional[int] = None,
    ):
        self.store = store
        self.consumer_id = consumer_id or default_consumer_id()
        # Fixed for the consumer's lifetime
        self.max_attempts = store.max_attempts if max_attempts is None else max_attempts
        self.batch_size = settings.EVENT_BATCH_SIZE if batch_size is None else batch_size
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")
        if self.batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self._handlers: Dict[str, EventHandler] = {}

    def register(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            raise ValueError(f"Handler already registered for event type {event_type}")
        self._handlers[event_type] = handler

    def handles(self, event_type: str) -> bool:
        return event_type in self._handlers

    def run_once(self) -> ConsumerRunResult:
        """
        Process one claimed batch. StorageFailure from the store propagates;
        the caller decides when to try again.
        """
        records = self.store.claim_unprocessed(self.consumer_id, self.max_attempts, self.batch_size)
        result = ConsumerRunResult(claimed=len(records))

        for record in records:
            event_id = record.event_id
            event_type = record.event_type
            try:
                self._dispatch(record)
            except Exception as e:
                error_message = str(e) or e.__class__.__name__
                logger.warning(f"[EVENT_CONSUMER] Event {event_id} ({event_type}) failed: {error_message}")
                # Drop anything the handler left half-written before reporting
                self.store.db.rollback()
                self.store.mark_processed(event_id, False, error_message)
                result.failed += 1
            else:
                self.store.mark_processed(event_id, True)
                result.succeeded += 1

        if records:
            logger.info(
                f"[EVENT_CONSUMER] {self.consumer_id}: {result.succeeded} processed, "
                f"{result.failed} failed out of {result.claimed}"
            )
        return result

    def _dispatch(self, record: EventRecord) -> None:
        handler = self._handlers.get(record.event_type)
        if handler is None:
            raise UnhandledEventType(f"No handler registered for event type {record.event_type}")
        try:
            payload = json.loads(record.data)
        except ValueError as e:
            raise ValueError(f"Invalid event data: {e}") from e
        handler(record, payload)
