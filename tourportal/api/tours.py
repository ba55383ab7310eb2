# tourportal/api/tours.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from tourportal.core.config import POPULAR_DEFAULT_LIMIT
from tourportal.core.db import get_db
from tourportal.core.errors import NotFound
from tourportal.models.orm import Tour
from tourportal.models.schemas import TourOut, dump
from tourportal.services import catalog

router = APIRouter(prefix="/api/tours", tags=["tours"])
logger = logging.getLogger("tourportal.api.tours")


@router.get("")
def list_tours(
    search: Optional[str] = None,
    destination_id: Optional[int] = Query(None, alias="destinationId"),
    popular: bool = False,
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Newest first; `popular=true` reorders by completed orders."""
    q = db.query(Tour).options(joinedload(Tour.destination))
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Tour.title.ilike(like), Tour.short_description.ilike(like)))
    if destination_id:
        q = q.filter(Tour.destination_id == destination_id)
    tours = q.order_by(Tour.created_at.desc(), Tour.id.desc()).all()

    if popular:
        ranked = catalog.popular_tours(db, tours, limit or POPULAR_DEFAULT_LIMIT)
        return [{**dump(TourOut, e.item), "orderCount": e.order_count} for e in ranked]

    if limit:
        tours = tours[:limit]
    return [dump(TourOut, t) for t in tours]


@router.get("/{slug}")
def get_tour(slug: str, db: Session = Depends(get_db)):
    tour = db.query(Tour).options(joinedload(Tour.destination)).filter(Tour.slug == slug).first()
    if not tour:
        raise NotFound("Tour not found")
    return dump(TourOut, tour)
