# tourportal/services/statistics.py
"""
Dashboard figures for the admin and manager consoles.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tourportal.models.orm import Destination, Order, Ticket, TicketResponse, Tour, User


def _as_number(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0


def admin_statistics(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    month_ago = now - timedelta(days=30)

    orders = db.query(func.count(Order.id)).scalar() or 0
    revenue, average = db.query(func.sum(Order.total_price), func.avg(Order.total_price)).one()
    cancelled = db.query(func.count(Order.id)).filter(Order.status == "CANCELLED").scalar() or 0

    return {
        "users": db.query(func.count(User.id)).scalar() or 0,
        "orders": orders,
        "destinations": db.query(func.count(Destination.id)).scalar() or 0,
        "tours": db.query(func.count(Tour.id)).scalar() or 0,
        "revenue": _as_number(revenue),
        "averageOrderValue": round(_as_number(average), 2),
        "newOrdersLastMonth": db.query(func.count(Order.id)).filter(Order.created_at >= month_ago).scalar() or 0,
        "cancelledOrders": cancelled,
        # One decimal, as a string, like the dashboard shows it
        "cancelledOrdersPercentage": f"{cancelled / orders * 100:.1f}" if orders else "0",
    }


def _average_first_response_hours(db: Session) -> Optional[float]:
    first_reply = (
        db.query(
            TicketResponse.ticket_id.label("ticket_id"),
            func.min(TicketResponse.created_at).label("replied_at"),
        )
        .filter(TicketResponse.is_from_staff.is_(True))
        .group_by(TicketResponse.ticket_id)
        .subquery()
    )
    rows = (
        db.query(Ticket.created_at, first_reply.c.replied_at)
        .join(first_reply, first_reply.c.ticket_id == Ticket.id)
        .all()
    )
    if not rows:
        return None
    # Computed in Python: date arithmetic differs between SQLite and Postgres
    total = sum((replied - created).total_seconds() for created, replied in rows)
    return round(total / len(rows) / 3600, 1)


def manager_statistics(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    recent = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(3).all()

    return {
        "ordersThisMonth": db.query(func.count(Order.id)).filter(Order.created_at >= month_start).scalar() or 0,
        "requestsThisMonth": db.query(func.count(Ticket.id)).filter(Ticket.created_at >= month_start).scalar() or 0,
        "ordersProcessed": db.query(func.count(Order.id))
        .filter(Order.status.in_(("CONFIRMED", "COMPLETED")))
        .scalar() or 0,
        "ordersAwaitingAction": db.query(func.count(Order.id)).filter(Order.status == "PENDING").scalar() or 0,
        "openTickets": db.query(func.count(Ticket.id)).filter(Ticket.status.in_(("OPEN", "IN_PROGRESS"))).scalar() or 0,
        "averageResponseTimeHours": _average_first_response_hours(db),
        "recentOrders": [
            {
                "id": o.id,
                "createdAt": o.created_at.isoformat(),
                "name": o.user.name if o.user else None,
                "email": o.contact_email,
                "phone": o.contact_phone,
                "tourTitle": o.tour.title if o.tour else None,
                "quantity": o.quantity,
                "status": o.status,
            }
            for o in recent
        ],
    }
