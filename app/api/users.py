"""
User Management API
Creates users, assigns roles and records the matching domain events.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models import User, Role
from app.schemas.user import User as UserSchema, UserCreate
from app.services.domain_events import commit_with_event
from app.services.event_handlers import USER_CREATED, ROLE_ASSIGNED

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Create a user with its initial roles and record a UserCreated event"""
    existing_user = db.query(User).filter(
        or_(User.username == user_data.username, User.email == user_data.email)
    ).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this username or email already exists"
        )

    role_ids = {ref.role_id for ref in user_data.roles}
    roles = []
    if role_ids:
        roles = db.query(Role).filter(Role.role_id.in_(role_ids)).order_by(Role.role_id).all()
        missing = sorted(role_ids - {role.role_id for role in roles})
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Role(s) not found: {', '.join(str(r) for r in missing)}"
            )

    user = User(**user_data.model_dump(exclude={"roles"}))
    user.roles = roles
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent insert of the same username/email
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this username or email already exists"
        )

    payload = UserSchema.model_validate(user).model_dump(mode="json")
    commit_with_event(db, USER_CREATED, "users/create", payload)
    db.refresh(user)

    logger.info(f"[USERS] Created user {user.user_id} ({user.username}) with {len(roles)} role(s)")
    return user


@router.get("/{user_id}", response_model=UserSchema)
def get_user(
    user_id: int,
    db: Session = Depends(get_db)
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.post("/{user_id}/roles/{role_id}", response_model=UserSchema)
def assign_role(
    user_id: int,
    role_id: int,
    db: Session = Depends(get_db)
):
    """Assign an existing role to a user and record a RoleAssigned event"""
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    role = db.get(Role, role_id)
    if not role:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role not found"
        )
    if role in user.roles:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User {user_id} already has role {role.role_name}"
        )

    user.roles.append(role)
    db.flush()
    commit_with_event(
        db,
        ROLE_ASSIGNED,
        "users/roles/assign",
        {"user_id": user_id, "role_id": role_id, "role_name": role.role_name},
    )
    db.refresh(user)

    logger.info(f"[USERS] Assigned role {role_id} to user {user_id}")
    return user
