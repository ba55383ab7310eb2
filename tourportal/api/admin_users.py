# tourportal/api/admin_users.py
"""
User management API endpoints.
Admins only; managers have no access here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.auth.security import hash_password
from tourportal.core.config import DEFAULT_PAGE_SIZE
from tourportal.core.db import commit_or_conflict, get_db
from tourportal.core.errors import Conflict, NotFound
from tourportal.models.orm import User, ROLES
from tourportal.models.schemas import UserCreateIn, UserOut, UserUpdateIn, dump
from tourportal.services.pagination import paginate
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/admin/users", tags=["admin"])
logger = logging.getLogger("tourportal.api.admin_users")

EMAIL_TAKEN = "A user with this email already exists"


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


@router.get("")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[str] = Query(None, pattern="^(" + "|".join(ROLES) + ")$"),
    session: SessionContext = Depends(require(Action.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    List users, newest first.
    `search` matches name and email; `role` narrows to one role.
    """
    q = db.query(User)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(User.name.ilike(like), User.email.ilike(like)))
    if role:
        q = q.filter(User.role == role)

    users, pagination = paginate(q.order_by(User.created_at.desc()), page, limit)
    return {"users": [dump(UserOut, u) for u in users], "pagination": pagination}


@router.post("", status_code=201)
def create_user(
    session: SessionContext = Depends(require(Action.MANAGE_USERS)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    """Create a user with any role."""
    data = validate_payload(UserCreateIn, payload)
    email = data.email.lower()

    if db.query(User.id).filter(User.email == email).first():
        raise Conflict(EMAIL_TAKEN)

    user = User(
        name=data.name,
        email=email,
        hashed_password=hash_password(data.password),
        role=data.role,
        phone=data.phone or None,
        address=data.address or None,
    )
    db.add(user)
    commit_or_conflict(db, EMAIL_TAKEN)
    db.refresh(user)

    logger.info("Admin %s created user %s (role=%s)", session.user_id, user.id, user.role)
    return dump(UserOut, user)


@router.get("/{user_id}")
def get_user(
    user_id: str,
    session: SessionContext = Depends(require(Action.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    return dump(UserOut, _get_user(db, user_id))


@router.put("/{user_id}")
def update_user(
    user_id: str,
    session: SessionContext = Depends(require(Action.MANAGE_USERS)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    """
    Update a user. The password changes only when one is supplied;
    empty phone or address are stored as null.
    """
    user = _get_user(db, user_id)
    data = validate_payload(UserUpdateIn, payload)
    email = data.email.lower()

    if email != user.email:
        if db.query(User.id).filter(User.email == email, User.id != user.id).first():
            raise Conflict(EMAIL_TAKEN)

    user.name = data.name
    user.email = email
    user.role = data.role
    user.phone = data.phone
    user.address = data.address
    if data.password:
        user.hashed_password = hash_password(data.password)

    commit_or_conflict(db, EMAIL_TAKEN)
    db.refresh(user)
    logger.info("Admin %s updated user %s", session.user_id, user.id)
    return dump(UserOut, user)


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    session: SessionContext = Depends(require(Action.DELETE_USER)),
    db: Session = Depends(get_db),
):
    """
    Delete a user together with their reviews, orders, favorites and tickets.
    Prevent admin from deleting themselves.
    """
    authorize(session, Action.DELETE_USER, target_user_id=user_id)

    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()

    logger.info("Admin %s deleted user %s", session.user_id, user_id)
    return {"ok": True, "id": user_id}
