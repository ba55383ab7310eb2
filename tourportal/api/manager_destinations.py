# tourportal/api/manager_destinations.py
"""
Destination management for managers (and admins).
A destination that still has tours cannot be deleted here.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.db import get_db
from tourportal.models.orm import Destination
from tourportal.models.schemas import DestinationOut, ManagerDestinationIn, dump
from tourportal.services import catalog
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/manager/destinations", tags=["manager"])
logger = logging.getLogger("tourportal.api.manager_destinations")


@router.get("")
def list_destinations(
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    counts = catalog.tour_counts(db)
    destinations = db.query(Destination).order_by(Destination.name.asc()).all()
    return [{**dump(DestinationOut, d), "tourCount": counts.get(d.id, 0)} for d in destinations]


@router.post("", status_code=201)
def create_destination(
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(ManagerDestinationIn, payload)
    destination = catalog.save_destination(db, Destination(), data)
    logger.info("Manager %s created destination %s", session.user_id, destination.slug)
    return dump(DestinationOut, destination)


@router.get("/{destination_id}")
def get_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    return {**dump(DestinationOut, destination), "tourCount": len(destination.tours)}


@router.put("/{destination_id}")
def update_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    data = validate_payload(ManagerDestinationIn, payload)
    destination = catalog.save_destination(db, destination, data)
    return dump(DestinationOut, destination)


@router.delete("/{destination_id}")
def delete_destination(
    destination_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    destination = catalog.get_destination(db, destination_id)
    catalog.delete_destination_if_empty(db, destination)
    return {"ok": True}
