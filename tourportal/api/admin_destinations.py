# tourportal/api/admin_destinations.py
"""
Destination management for admins.
Deleting a destination here also removes all of its tours.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.config import DEFAULT_PAGE_SIZE
from tourportal.core.db import get_db
from tourportal.models.orm import Destination
from tourportal.models.schemas import AdminDestinationIn, DestinationOut, dump
from tourportal.services import catalog
from tourportal.services.pagination import paginate
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/admin/destinations", tags=["admin"])
logger = logging.getLogger("tourportal.api.admin_destinations")


@router.get("")
def list_destinations(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    search: Optional[str] = None,
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    q = db.query(Destination)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Destination.name.ilike(like), Destination.slug.ilike(like)))
    destinations, pagination = paginate(q.order_by(Destination.name.asc()), page, limit)

    counts = catalog.tour_counts(db)
    return {
        "destinations": [
            {**dump(DestinationOut, d), "tourCount": counts.get(d.id, 0)} for d in destinations
        ],
        "pagination": pagination,
    }


@router.post("", status_code=201)
def create_destination(
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(AdminDestinationIn, payload)
    destination = catalog.save_destination(db, Destination(), data)
    logger.info("Admin %s created destination %s", session.user_id, destination.slug)
    return dump(DestinationOut, destination)


@router.get("/{destination_id}")
def get_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    return {**dump(DestinationOut, destination), "tourCount": len(destination.tours)}


@router.put("/{destination_id}")
def update_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.ADMIN_MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    data = validate_payload(AdminDestinationIn, payload)
    destination = catalog.save_destination(db, destination, data)
    return dump(DestinationOut, destination)


@router.delete("/{destination_id}")
def delete_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.ADMIN_DELETE_DESTINATION)),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    counts = catalog.delete_destination_cascade(db, destination)
    return {"ok": True, **counts}
