# tourportal/api/tickets.py
"""
Support tickets as seen by their author.

Status changes on this router are staff-only; authors can only talk.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Query as OrmQuery, Session, selectinload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.core.db import get_db
from tourportal.core.errors import InvalidInput
from tourportal.models.orm import Ticket, TICKET_STATUSES
from tourportal.models.schemas import (
    TicketIn,
    TicketOut,
    TicketResponseIn,
    TicketResponseOut,
    TicketStatusIn,
    dump,
)
from tourportal.services import tickets as ticket_service
from tourportal.services.validation import Violation, validate_payload, json_body

router = APIRouter(prefix="/api/tickets", tags=["tickets"])
logger = logging.getLogger("tourportal.api.tickets")

SORTS = {
    "newest": (Ticket.created_at.desc(), Ticket.id.desc()),
    "oldest": (Ticket.created_at.asc(), Ticket.id.asc()),
    "updated": (Ticket.updated_at.desc(), Ticket.id.desc()),
    "status": (Ticket.status.asc(), Ticket.updated_at.desc()),
}


def apply_filters(q: OrmQuery, status: Optional[str], sort: str, allowed_sorts) -> OrmQuery:
    """Shared by the author and staff ticket lists."""
    if status:
        if status not in TICKET_STATUSES:
            raise InvalidInput([Violation("status", f"Must be one of {', '.join(TICKET_STATUSES)}")])
        q = q.filter(Ticket.status == status)
    if sort not in allowed_sorts:
        raise InvalidInput([Violation("sort", f"Must be one of {', '.join(allowed_sorts)}")])
    return q.order_by(*SORTS[sort])


@router.get("")
def list_my_tickets(
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort: str = "newest",
    session: SessionContext = Depends(require(Action.LIST_OWN_TICKETS)),
    db: Session = Depends(get_db),
):
    q = (
        db.query(Ticket)
        .options(selectinload(Ticket.responses))
        .filter(Ticket.user_id == session.user_id)
    )
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Ticket.subject.ilike(like), Ticket.message.ilike(like)))
    q = apply_filters(q, status, sort, ("newest", "oldest", "updated"))
    return [dump(TicketOut, t) for t in q.all()]


@router.post("", status_code=201)
def create_ticket(
    session: SessionContext = Depends(require(Action.CREATE_TICKET)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(TicketIn, payload)
    ticket = ticket_service.open_ticket(db, session, data.subject.strip(), data.message.strip())
    return dump(TicketOut, ticket)


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: int,
    session: SessionContext = Depends(require(Action.READ_TICKET)),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    authorize(session, Action.READ_TICKET, owner_id=ticket.user_id)
    return dump(TicketOut, ticket)


@router.patch("/{ticket_id}")
def update_ticket_status(
    ticket_id: int,
    session: SessionContext = Depends(require(Action.TRIAGE_TICKETS)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    data = validate_payload(TicketStatusIn, payload)
    ticket = ticket_service.set_status(db, ticket, data.status)
    return dump(TicketOut, ticket)


@router.post("/{ticket_id}/responses", status_code=201)
def respond_to_ticket(
    ticket_id: int,
    session: SessionContext = Depends(require(Action.RESPOND_TICKET)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    authorize(session, Action.RESPOND_TICKET, owner_id=ticket.user_id)
    data = validate_payload(TicketResponseIn, payload)
    response = ticket_service.add_response(db, session, ticket, data.message)
    return dump(TicketResponseOut, response)
