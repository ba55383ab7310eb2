# tourportal/api/profile.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.auth.security import hash_password, verify_password
from tourportal.core.db import get_db
from tourportal.core.errors import InvalidOperation, NotFound
from tourportal.models.orm import User
from tourportal.models.schemas import ChangePasswordIn, ProfileUpdateIn, UserOut, dump
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/user", tags=["profile"])
logger = logging.getLogger("tourportal.api.profile")


def _current_user(db: Session, session: SessionContext) -> User:
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


@router.get("/profile")
def get_profile(
    session: SessionContext = Depends(require(Action.VIEW_PROFILE)),
    db: Session = Depends(get_db),
):
    user = _current_user(db, session)
    authorize(session, Action.VIEW_PROFILE, owner_id=user.id)
    return dump(UserOut, user)


@router.put("/profile")
def update_profile(
    session: SessionContext = Depends(require(Action.UPDATE_PROFILE)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    user = _current_user(db, session)
    authorize(session, Action.UPDATE_PROFILE, owner_id=user.id)
    data = validate_payload(ProfileUpdateIn, payload)

    user.name = data.name
    user.phone = data.phone
    user.address = data.address
    db.commit()
    db.refresh(user)
    return dump(UserOut, user)


@router.post("/change-password")
def change_password(
    session: SessionContext = Depends(require(Action.CHANGE_PASSWORD)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    user = _current_user(db, session)
    authorize(session, Action.CHANGE_PASSWORD, owner_id=user.id)
    data = validate_payload(ChangePasswordIn, payload)

    if not user.hashed_password:
        raise InvalidOperation("This account has no password to change")
    if not verify_password(data.current_password, user.hashed_password):
        raise InvalidOperation("Current password is incorrect")

    user.hashed_password = hash_password(data.new_password)
    db.commit()
    logger.info("Password changed for user %s", user.id)
    return {"ok": True}
