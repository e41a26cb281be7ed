from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class RoleBase(BaseModel):
    role_name: str = Field(min_length=1)
    description: Optional[str] = None


class RoleCreate(RoleBase):
    pass


class RoleRef(BaseModel):
    """Reference to an existing role when creating a user"""
    role_id: int


class Role(RoleBase):
    role_id: int
    created_at: datetime

    class Config:
        from_attributes = True
