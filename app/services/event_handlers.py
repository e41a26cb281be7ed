"""
Default handlers for the domain events this service records.
"""
import logging
from typing import Any

from app.models.event_record import EventRecord
from app.services.event_consumer import EventConsumer
from app.services.event_store import EventStore

logger = logging.getLogger(__name__)

USER_CREATED = "UserCreated"
ROLE_CREATED = "RoleCreated"
ROLE_ASSIGNED = "RoleAssigned"


def handle_user_created(record: EventRecord, payload: Any) -> None:
    if not isinstance(payload, dict) or "user_id" not in payload:
        raise ValueError("UserCreated payload must contain user_id")
    role_names = [r.get("role_name") for r in payload.get("roles", [])]
    logger.info(f"[EVENT_HANDLER] User {payload['user_id']} ({payload.get('username')}) created with roles {role_names}")


def handle_role_created(record: EventRecord, payload: Any) -> None:
    if not isinstance(payload, dict) or "role_id" not in payload:
        raise ValueError("RoleCreated payload must contain role_id")
    logger.info(f"[EVENT_HANDLER] Role {payload['role_id']} ({payload.get('role_name')}) created")


def handle_role_assigned(record: EventRecord, payload: Any) -> None:
    if not isinstance(payload, dict) or "user_id" not in payload or "role_id" not in payload:
        raise ValueError("RoleAssigned payload must contain user_id and role_id")
    logger.info(f"[EVENT_HANDLER] Role {payload['role_id']} assigned to user {payload['user_id']}")


def build_default_consumer(store: EventStore, **kwargs) -> EventConsumer:
    consumer = EventConsumer(store, **kwargs)
    consumer.register(USER_CREATED, handle_user_created)
    consumer.register(ROLE_CREATED, handle_role_created)
    consumer.register(ROLE_ASSIGNED, handle_role_assigned)
    return consumer
