# tourportal/api/orders.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.core.db import get_db
from tourportal.core.errors import NotFound
from tourportal.models.orm import Order
from tourportal.models.schemas import OrderIn, OrderOut, dump
from tourportal.services import orders as order_service
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/orders", tags=["orders"])
logger = logging.getLogger("tourportal.api.orders")


@router.get("")
def list_my_orders(
    session: SessionContext = Depends(require(Action.LIST_OWN_ORDERS)),
    db: Session = Depends(get_db),
):
    orders = (
        db.query(Order)
        .options(joinedload(Order.tour))
        .filter(Order.user_id == session.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return [dump(OrderOut, o) for o in orders]


@router.post("", status_code=201)
def create_order(
    session: SessionContext = Depends(require(Action.CREATE_ORDER)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(OrderIn, payload)
    order = order_service.place_order(db, session, data)
    return dump(OrderOut, order)


@router.get("/{order_id}")
def get_order(
    order_id: int,
    session: SessionContext = Depends(require(Action.READ_ORDER)),
    db: Session = Depends(get_db),
):
    order = db.query(Order).options(joinedload(Order.tour)).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    authorize(session, Action.READ_ORDER, owner_id=order.user_id)
    return dump(OrderOut, order)
