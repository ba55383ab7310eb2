# tourportal/api/manager_tickets.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.db import get_db
from tourportal.models.orm import Ticket, User
from tourportal.models.schemas import (
    StaffTicketOut,
    StaffTicketResponseIn,
    StaffTicketStatusIn,
    TicketResponseOut,
    dump,
)
from tourportal.services import tickets as ticket_service
from tourportal.services.validation import validate_payload, json_body
from tourportal.api.tickets import apply_filters

router = APIRouter(prefix="/api/manager/tickets", tags=["manager"])
logger = logging.getLogger("tourportal.api.manager_tickets")


@router.get("")
def list_tickets(
    search: Optional[str] = None,
    status: Optional[str] = None,
    sort: str = "newest",
    session: SessionContext = Depends(require(Action.TRIAGE_TICKETS)),
    db: Session = Depends(get_db),
):
    """All tickets; search also matches the author's name, email and phone."""
    q = (
        db.query(Ticket)
        .join(User, User.id == Ticket.user_id)
        .options(joinedload(Ticket.user), selectinload(Ticket.responses))
    )
    if search:
        like = f"%{search}%"
        q = q.filter(
            or_(
                Ticket.subject.ilike(like),
                Ticket.message.ilike(like),
                User.name.ilike(like),
                User.email.ilike(like),
                User.phone.ilike(like),
            )
        )
    q = apply_filters(q, status, sort, ("newest", "oldest", "updated", "status"))
    return [dump(StaffTicketOut, t) for t in q.all()]


@router.patch("")
def update_ticket_status(
    session: SessionContext = Depends(require(Action.TRIAGE_TICKETS)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(StaffTicketStatusIn, payload)
    ticket = ticket_service.get_ticket(db, data.ticket_id)
    ticket = ticket_service.set_status(db, ticket, data.status)
    return dump(StaffTicketOut, ticket)


@router.post("/response", status_code=201)
def respond(
    session: SessionContext = Depends(require(Action.RESPOND_TICKET_AS_STAFF)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(StaffTicketResponseIn, payload)
    ticket = ticket_service.get_ticket(db, data.ticket_id)
    response = ticket_service.add_response(db, session, ticket, data.message)
    return dump(TicketResponseOut, response)
