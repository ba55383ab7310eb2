import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from .permissions import require
from .policy import Action, SessionContext
from .security import create_token, hash_password, verify_password
from tourportal.core.config import COOKIE_SECURE, JWT_EXPIRE_MIN, SESSION_COOKIE_NAME
from tourportal.core.db import commit_or_conflict, get_db
from tourportal.core.errors import Conflict, NotFound, Unauthenticated
from tourportal.models.orm import User
from tourportal.models.schemas import LoginIn, RegisterIn, UserOut, dump
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("tourportal.auth.routes")


@router.post("/register", status_code=201)
def register(payload: dict = Depends(json_body), db: Session = Depends(get_db)):
    data = validate_payload(RegisterIn, payload)
    email = data.email.lower()

    if db.query(User).filter(User.email == email).first():
        raise Conflict("A user with this email already exists")

    user = User(
        name=data.name,
        email=email,
        hashed_password=hash_password(data.password),
        role="USER",
    )
    db.add(user)
    commit_or_conflict(db, "A user with this email already exists")
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return {"user": dump(UserOut, user)}


@router.post("/login")
def login(response: Response, payload: dict = Depends(json_body), db: Session = Depends(get_db)):
    data = validate_payload(LoginIn, payload)
    user = db.query(User).filter(User.email == data.email.lower()).first()

    if not user:
        logger.info("Login failed for '%s' (not found)", data.email)
        raise Unauthenticated("Invalid credentials")

    if not verify_password(data.password, user.hashed_password):
        logger.info("Login failed for '%s' (invalid password)", data.email)
        raise Unauthenticated("Invalid credentials")

    # Only the id travels in the token; role is re-read on every request
    token = create_token({"sub": user.id})
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=JWT_EXPIRE_MIN * 60,
        httponly=True,
        samesite="lax",
        secure=COOKIE_SECURE,
    )

    logger.info("Login success for user %s (role=%s)", user.id, user.role)
    return {"token": token, "user": dump(UserOut, user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"ok": True}


@router.get("/me")
def me(session: SessionContext = Depends(require(Action.VIEW_PROFILE)), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise NotFound("User not found")
    return {"user": dump(UserOut, user)}
