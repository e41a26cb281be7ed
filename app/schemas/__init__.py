from app.schemas.user import User, UserCreate
from app.schemas.role import Role, RoleCreate, RoleRef
from app.schemas.event import EventRecord, EventProcessedReport

__all__ = [
    "User", "UserCreate",
    "Role", "RoleCreate", "RoleRef",
    "EventRecord", "EventProcessedReport",
]
