# tourportal/api/manager_tours.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.db import get_db
from tourportal.models.orm import Tour
from tourportal.models.schemas import ManagerTourIn, TourOut, dump
from tourportal.services import catalog
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/manager/tours", tags=["manager"])
logger = logging.getLogger("tourportal.api.manager_tours")


@router.get("")
def list_tours(
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    tours = (
        db.query(Tour)
        .options(joinedload(Tour.destination))
        .order_by(Tour.created_at.desc(), Tour.id.desc())
        .all()
    )
    return [dump(TourOut, t) for t in tours]


@router.post("", status_code=201)
def create_tour(
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(ManagerTourIn, payload)
    tour = catalog.save_tour(db, Tour(), data)
    logger.info("Manager %s created tour %s", session.user_id, tour.slug)
    return dump(TourOut, tour)


@router.get("/{tour_id}")
def get_tour(
    tour_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    return dump(TourOut, catalog.get_tour(db, tour_id))


@router.put("/{tour_id}")
def update_tour(
    tour_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    tour = catalog.get_tour(db, tour_id)
    data = validate_payload(ManagerTourIn, payload)
    tour = catalog.save_tour(db, tour, data)
    return dump(TourOut, tour)


@router.delete("/{tour_id}")
def delete_tour(
    tour_id: int,
    session: SessionContext = Depends(require(Action.MANAGE_CATALOG)),
    db: Session = Depends(get_db),
):
    """Cancels the tour's orders and removes its reviews before deleting it."""
    tour = catalog.get_tour(db, tour_id)
    counts = catalog.delete_tour_cancelling_orders(db, tour)
    return {"ok": True, **counts}
