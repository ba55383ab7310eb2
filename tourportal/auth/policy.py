# tourportal/auth/policy.py
"""
Access control policy.

Pure decision functions: given a session context, an action and (optionally)
the owner of the resource being touched, decide whether the action may run.
Nothing in this module touches the database or the request.

Checks run in a fixed order and stop at the first failure:
    1. authentication (skipped for public actions)
    2. role allow-set
    3. ownership (staff are exempt)
    4. self-protection (an admin cannot delete their own account)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from tourportal.core.errors import ApiError, Forbidden, InvalidOperation, Unauthenticated


class Role(str, Enum):
    USER = "USER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


STAFF_ROLES: FrozenSet[Role] = frozenset({Role.MANAGER, Role.ADMIN})
ANY_ROLE: FrozenSet[Role] = frozenset({Role.USER, Role.MANAGER, Role.ADMIN})
ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMIN})


class Action(str, Enum):
    READ_PUBLIC = "read_public"

    CREATE_REVIEW = "create_review"
    CREATE_ORDER = "create_order"
    CREATE_TICKET = "create_ticket"
    CREATE_FAVORITE = "create_favorite"

    VIEW_PROFILE = "view_profile"
    UPDATE_PROFILE = "update_profile"
    CHANGE_PASSWORD = "change_password"
    LIST_OWN_ORDERS = "list_own_orders"
    READ_ORDER = "read_order"
    LIST_OWN_TICKETS = "list_own_tickets"
    READ_TICKET = "read_ticket"
    RESPOND_TICKET = "respond_ticket"
    LIST_FAVORITES = "list_favorites"
    DELETE_FAVORITE = "delete_favorite"
    CHECK_REVIEW_STATUS = "check_review_status"

    MODERATE_REVIEWS = "moderate_reviews"
    MANAGE_USERS = "manage_users"
    DELETE_USER = "delete_user"
    ADMIN_MANAGE_CATALOG = "admin_manage_catalog"
    ADMIN_DELETE_DESTINATION = "admin_delete_destination"
    VIEW_ADMIN_STATISTICS = "view_admin_statistics"

    MANAGE_CATALOG = "manage_catalog"
    TRIAGE_TICKETS = "triage_tickets"
    RESPOND_TICKET_AS_STAFF = "respond_ticket_as_staff"
    VIEW_MANAGER_STATISTICS = "view_manager_statistics"

    CHANGE_ORDER_STATUS = "change_order_status"
    LIST_ALL_ORDERS = "list_all_orders"


@dataclass(frozen=True)
class Rule:
    # None means the action is open to anonymous callers
    allowed: Optional[FrozenSet[Role]]
    ownership: bool = False


# Explicit allow-sets; ADMIN is listed wherever it is allowed, never implied.
POLICY: Dict[Action, Rule] = {
    Action.READ_PUBLIC: Rule(allowed=None),

    Action.CREATE_REVIEW: Rule(ANY_ROLE),
    Action.CREATE_ORDER: Rule(ANY_ROLE),
    Action.CREATE_TICKET: Rule(ANY_ROLE),
    Action.CREATE_FAVORITE: Rule(ANY_ROLE),

    Action.VIEW_PROFILE: Rule(ANY_ROLE, ownership=True),
    Action.UPDATE_PROFILE: Rule(ANY_ROLE, ownership=True),
    Action.CHANGE_PASSWORD: Rule(ANY_ROLE, ownership=True),
    Action.LIST_OWN_ORDERS: Rule(ANY_ROLE, ownership=True),
    Action.READ_ORDER: Rule(ANY_ROLE, ownership=True),
    Action.LIST_OWN_TICKETS: Rule(ANY_ROLE, ownership=True),
    Action.READ_TICKET: Rule(ANY_ROLE, ownership=True),
    Action.RESPOND_TICKET: Rule(ANY_ROLE, ownership=True),
    Action.LIST_FAVORITES: Rule(ANY_ROLE, ownership=True),
    Action.DELETE_FAVORITE: Rule(ANY_ROLE, ownership=True),
    Action.CHECK_REVIEW_STATUS: Rule(ANY_ROLE, ownership=True),

    Action.MODERATE_REVIEWS: Rule(ADMIN_ONLY),
    Action.MANAGE_USERS: Rule(ADMIN_ONLY),
    Action.DELETE_USER: Rule(ADMIN_ONLY),
    Action.ADMIN_MANAGE_CATALOG: Rule(ADMIN_ONLY),
    Action.ADMIN_DELETE_DESTINATION: Rule(ADMIN_ONLY),
    Action.VIEW_ADMIN_STATISTICS: Rule(ADMIN_ONLY),

    Action.MANAGE_CATALOG: Rule(STAFF_ROLES),
    Action.TRIAGE_TICKETS: Rule(STAFF_ROLES),
    Action.RESPOND_TICKET_AS_STAFF: Rule(STAFF_ROLES),
    Action.VIEW_MANAGER_STATISTICS: Rule(STAFF_ROLES),

    Action.CHANGE_ORDER_STATUS: Rule(STAFF_ROLES),
    Action.LIST_ALL_ORDERS: Rule(STAFF_ROLES),
}


@dataclass(frozen=True)
class SessionContext:
    """Resolved identity of the caller, passed explicitly into every check."""
    user_id: str
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: Optional[ApiError] = None

    def raise_for_denial(self) -> None:
        if not self.allowed and self.error is not None:
            raise self.error


ALLOW = Decision(allowed=True)


def _deny(error: ApiError) -> Decision:
    return Decision(allowed=False, error=error)


def is_staff(session: Optional[SessionContext]) -> bool:
    return session is not None and session.is_staff


def evaluate(
    session: Optional[SessionContext],
    action: Action,
    owner_id: Optional[str] = None,
    target_user_id: Optional[str] = None,
) -> Decision:
    """
    Decide whether `session` may perform `action`.

    `owner_id` is the userId recorded on the resource; pass it once the
    resource is loaded. When it is omitted the ownership step is skipped, so
    route dependencies can run steps 1-2 before any store access.
    `target_user_id` is only consulted for DELETE_USER.
    """
    rule = POLICY[action]

    if rule.allowed is None:
        return ALLOW

    if session is None:
        return _deny(Unauthenticated())

    if session.role not in rule.allowed:
        return _deny(Forbidden())

    if rule.ownership and owner_id is not None:
        if owner_id != session.user_id and not session.is_staff:
            return _deny(Forbidden("You do not have access to this resource"))

    if action is Action.DELETE_USER and target_user_id is not None:
        if target_user_id == session.user_id:
            return _deny(InvalidOperation("You cannot delete your own account"))

    return ALLOW


def authorize(
    session: Optional[SessionContext],
    action: Action,
    owner_id: Optional[str] = None,
    target_user_id: Optional[str] = None,
) -> Optional[SessionContext]:
    """Raise the denial error if `evaluate` refuses; return the session otherwise."""
    evaluate(session, action, owner_id=owner_id, target_user_id=target_user_id).raise_for_denial()
    return session
