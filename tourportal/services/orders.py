# tourportal/services/orders.py
"""
Order placement and staff status changes, with seat accounting on the tour.
"""

import logging

from sqlalchemy.orm import Session

from tourportal.auth.policy import SessionContext
from tourportal.core.errors import InvalidOperation, NotFound
from tourportal.models.orm import Order, Tour
from tourportal.models.schemas import OrderIn

logger = logging.getLogger("tourportal.orders")


def _take_seats(db: Session, tour_id: int, quantity: int) -> bool:
    # Conditional UPDATE so two buyers cannot both take the last seats
    updated = (
        db.query(Tour)
        .filter(Tour.id == tour_id, Tour.available_seats >= quantity)
        .update({Tour.available_seats: Tour.available_seats - quantity}, synchronize_session=False)
    )
    return updated == 1


def _return_seats(db: Session, tour_id: int, quantity: int) -> None:
    db.query(Tour).filter(Tour.id == tour_id).update(
        {Tour.available_seats: Tour.available_seats + quantity}, synchronize_session=False
    )


def place_order(db: Session, session: SessionContext, data: OrderIn) -> Order:
    tour = db.query(Tour).filter(Tour.id == data.tour_id).first()
    if not tour:
        raise NotFound("Tour not found")

    if not _take_seats(db, tour.id, data.quantity):
        db.rollback()
        raise InvalidOperation(
            "Not enough seats available",
            availableSeats=tour.available_seats,
        )

    order = Order(
        user_id=session.user_id,
        tour_id=tour.id,
        quantity=data.quantity,
        total_price=tour.price * data.quantity,
        status="PENDING",
        contact_email=data.contact_email,
        contact_phone=data.contact_phone,
    )
    db.add(order)
    db.commit()
    db.refresh(order)

    logger.info("Order %s placed by %s for tour %s (x%d)", order.id, session.user_id, tour.id, data.quantity)
    return order


def change_status(db: Session, order: Order, new_status: str) -> Order:
    """
    Move an order to `new_status`.

    Cancelling returns the seats to the tour. Leaving CANCELLED takes them
    again, and fails with the order left cancelled when they are gone.
    """
    old_status = order.status
    if new_status == old_status:
        return order

    if new_status == "CANCELLED":
        if order.tour_id is not None:
            _return_seats(db, order.tour_id, order.quantity)
    elif old_status == "CANCELLED":
        if order.tour_id is None or not _take_seats(db, order.tour_id, order.quantity):
            db.rollback()
            raise InvalidOperation("Not enough seats available to restore this order")

    order.status = new_status
    db.commit()
    db.refresh(order)

    logger.info("Order %s: %s -> %s", order.id, old_status, new_status)
    return order
