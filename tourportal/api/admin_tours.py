# tourportal/api/admin_tours.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.config import DEFAULT_PAGE_SIZE
from tourportal.core.db import get_db
from tourportal.models.orm import Tour
from tourportal.models.schemas import AdminTourIn, TourOut, dump
from tourportal.services import catalog
from tourportal.services.pagination import paginate
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/admin/tours", tags=["admin"])
logger = logging.getLogger("tourportal.api.admin_tours")


@router.get("")
def list_tours(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    search: Optional[str] = None,
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    q = db.query(Tour).options(joinedload(Tour.destination))
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Tour.title.ilike(like), Tour.slug.ilike(like)))
    tours, pagination = paginate(q.order_by(Tour.created_at.desc(), Tour.id.desc()), page, limit)
    return {"tours": [dump(TourOut, t) for t in tours], "pagination": pagination}


@router.post("", status_code=201)
def create_tour(
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(AdminTourIn, payload)
    tour = catalog.save_tour(db, Tour(), data)
    logger.info("Admin %s created tour %s", session.user_id, tour.slug)
    return dump(TourOut, tour)
