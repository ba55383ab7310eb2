# tourportal/auth/permissions.py
"""
Session resolution and authorization dependencies for routes.

The session is resolved once per request into a SessionContext and handed to
the policy explicitly; nothing here keeps global state.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .policy import Action, Role, SessionContext, authorize
from .security import verify_token
from tourportal.core.config import SESSION_COOKIE_NAME
from tourportal.core.db import get_db
from tourportal.models.orm import User

logger = logging.getLogger("tourportal.auth.permissions")


def _token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


def session_for_user(user: User) -> SessionContext:
    return SessionContext(user_id=user.id, role=Role(user.role), email=user.email, name=user.name)


def get_optional_session(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Optional[SessionContext]:
    """
    Resolve the caller from the Bearer header or the session cookie.
    Returns None for anonymous callers and for stale or invalid tokens.

    The role is read from the database, not from the token, so a role change
    takes effect on the next request.
    """
    token = _token_from_request(request, authorization)
    if not token:
        return None

    data = verify_token(token)
    if not data or not data.get("sub"):
        return None

    user = db.query(User).filter(User.id == data["sub"]).first()
    if not user:
        logger.info("Token for unknown user %s ignored", data["sub"])
        return None
    return session_for_user(user)


def require(action: Action) -> Callable[..., SessionContext]:
    """
    Dependency factory: run the authentication and role steps of the policy
    for `action` before the handler validates input or touches the store.

    Usage:
        @router.delete("/{user_id}")
        def delete_user(user_id: str, session: SessionContext = Depends(require(Action.DELETE_USER))):
            ...
    """
    def _dependency(session: Optional[SessionContext] = Depends(get_optional_session)) -> SessionContext:
        return authorize(session, action)

    _dependency.__name__ = f"require_{action.value}"
    return _dependency
