from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.schemas.role import Role, RoleRef


class UserBase(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)  # Plain str, validation of the address is not done here
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    active: bool = True


class UserCreate(UserBase):
    password_hash: str = Field(min_length=1)  # Already hashed by the caller
    roles: List[RoleRef] = []


class User(UserBase):
    user_id: int
    created_at: datetime
    updated_at: datetime
    roles: List[Role] = []

    class Config:
        from_attributes = True
