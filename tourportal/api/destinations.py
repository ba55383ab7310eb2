# tourportal/api/destinations.py
"""
Public destination catalog.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tourportal.core.config import POPULAR_DEFAULT_LIMIT
from tourportal.core.db import get_db
from tourportal.core.errors import NotFound
from tourportal.models.orm import Destination, Tour
from tourportal.models.schemas import DestinationOut, TourOut, dump
from tourportal.services import catalog

router = APIRouter(prefix="/api/destinations", tags=["destinations"])
logger = logging.getLogger("tourportal.api.destinations")


@router.get("")
def list_destinations(
    popular: bool = False,
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    All destinations by name, or with `popular=true` the most booked ones
    (completed orders over all their tours) first.
    """
    if popular:
        ranked = catalog.popular_destinations(db, limit or POPULAR_DEFAULT_LIMIT)
        return [
            {**dump(DestinationOut, e.item), "orderCount": e.order_count, "tourCount": e.tour_count}
            for e in ranked
        ]

    q = db.query(Destination).order_by(Destination.name.asc())
    if limit:
        q = q.limit(limit)
    return [dump(DestinationOut, d) for d in q.all()]


@router.get("/{slug}")
def get_destination(slug: str, db: Session = Depends(get_db)):
    destination = db.query(Destination).filter(Destination.slug == slug).first()
    if not destination:
        raise NotFound("Destination not found")

    tours = (
        db.query(Tour)
        .filter(Tour.destination_id == destination.id)
        .order_by(Tour.created_at.desc())
        .all()
    )
    return {**dump(DestinationOut, destination), "tours": [dump(TourOut, t) for t in tours]}
