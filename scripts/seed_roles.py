#!/usr/bin/env python3
"""Seed script to create the default roles"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import session_scope
from app.models import Role
from app.schemas.role import Role as RoleSchema
from app.services.domain_events import commit_with_event
from app.services.event_handlers import ROLE_CREATED

DEFAULT_ROLES = [
    ("ADMIN", "Full access to user and role management"),
    ("USER", "Standard user"),
]


def seed_roles():
    with session_scope() as db:
        for role_name, description in DEFAULT_ROLES:
            if db.query(Role).filter(Role.role_name == role_name).first():
                print(f"Role {role_name} already exists")
                continue
            role = Role(role_name=role_name, description=description)
            db.add(role)
            db.flush()
            payload = RoleSchema.model_validate(role).model_dump(mode="json")
            commit_with_event(db, ROLE_CREATED, "roles/create", payload)
            print(f"Role created: {role_name}")


if __name__ == "__main__":
    seed_roles()
