# tourportal/services/tickets.py
import logging

from sqlalchemy.orm import Session

from tourportal.auth.policy import SessionContext
from tourportal.core.errors import InvalidOperation, NotFound
from tourportal.models.orm import Ticket, TicketResponse

logger = logging.getLogger("tourportal.tickets")

# Tickets in these states accept no further responses
FINAL_STATUSES = frozenset({"CLOSED", "RESOLVED"})


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


def open_ticket(db: Session, session: SessionContext, subject: str, message: str) -> Ticket:
    ticket = Ticket(user_id=session.user_id, subject=subject, message=message, status="OPEN")
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket %s opened by %s", ticket.id, session.user_id)
    return ticket


def add_response(db: Session, session: SessionContext, ticket: Ticket, message: str) -> TicketResponse:
    """
    Append a response. Refused on closed or resolved tickets; the first staff
    response moves an OPEN ticket to IN_PROGRESS.
    """
    if ticket.status in FINAL_STATUSES:
        raise InvalidOperation(f"Cannot respond to a ticket with status {ticket.status}")

    from_staff = session.is_staff
    response = TicketResponse(ticket_id=ticket.id, message=message, is_from_staff=from_staff)
    db.add(response)
    if from_staff and ticket.status == "OPEN":
        ticket.status = "IN_PROGRESS"
    db.commit()
    db.refresh(response)

    logger.info("Response %s added to ticket %s (staff=%s)", response.id, ticket.id, from_staff)
    return response


def set_status(db: Session, ticket: Ticket, status: str) -> Ticket:
    if ticket.status != status:
        logger.info("Ticket %s: %s -> %s", ticket.id, ticket.status, status)
        ticket.status = status
        db.commit()
        db.refresh(ticket)
    return ticket
