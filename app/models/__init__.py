from app.models.user import User, user_roles
from app.models.role import Role
from app.models.event_record import EventRecord, EventStatus

__all__ = [
    "User", "user_roles", "Role", "EventRecord", "EventStatus",
]
