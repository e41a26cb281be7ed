"""
Role API
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List

from app.db.session import get_db
from app.models import Role
from app.schemas.role import Role as RoleSchema, RoleCreate
from app.services.domain_events import commit_with_event
from app.services.event_handlers import ROLE_CREATED

router = APIRouter()


@router.get("", response_model=List[RoleSchema])
def list_roles(db: Session = Depends(get_db)):
    return db.query(Role).order_by(Role.role_id).all()


@router.post("", response_model=RoleSchema, status_code=status.HTTP_201_CREATED)
def create_role(
    role_data: RoleCreate,
    db: Session = Depends(get_db)
):
    """Create a role and record a RoleCreated event"""
    existing = db.query(Role).filter(Role.role_name == role_data.role_name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Role {role_data.role_name} already exists"
        )

    role = Role(**role_data.model_dump())
    db.add(role)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same role_name
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Role {role_data.role_name} already exists"
        )
    payload = RoleSchema.model_validate(role).model_dump(mode="json")
    commit_with_event(db, ROLE_CREATED, "roles/create", payload)
    db.refresh(role)
    return role
