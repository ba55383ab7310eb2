# tourportal/api/admin_orders.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.config import DEFAULT_PAGE_SIZE
from tourportal.core.db import get_db
from tourportal.core.errors import NotFound
from tourportal.models.orm import Order, ORDER_STATUSES
from tourportal.models.schemas import OrderOut, OrderStatusIn, dump
from tourportal.services import orders as order_service
from tourportal.services.pagination import paginate
from tourportal.services.validation import validate_payload, json_body

# Staff console: managers and admins share this router
router = APIRouter(prefix="/api/admin/orders", tags=["admin"])
logger = logging.getLogger("tourportal.api.admin_orders")


def _staff_view(order: Order) -> dict:
    out = dump(OrderOut, order)
    out["user"] = {"name": order.user.name, "email": order.user.email} if order.user else None
    return out


@router.get("")
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    status: Optional[str] = Query(None, pattern="^(" + "|".join(ORDER_STATUSES) + ")$"),
    session: SessionContext = Depends(require(Action.LIST_ALL_ORDERS)),
    db: Session = Depends(get_db),
):
    q = db.query(Order).options(joinedload(Order.tour), joinedload(Order.user))
    if status:
        q = q.filter(Order.status == status)
    orders, pagination = paginate(q.order_by(Order.created_at.desc(), Order.id.desc()), page, limit)
    return {"orders": [_staff_view(o) for o in orders], "pagination": pagination}


@router.patch("")
def change_order_status(
    session: SessionContext = Depends(require(Action.CHANGE_ORDER_STATUS)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(OrderStatusIn, payload)
    order = db.query(Order).filter(Order.id == data.order_id).first()
    if not order:
        raise NotFound("Order not found")

    order = order_service.change_status(db, order, data.status)
    return _staff_view(order)
