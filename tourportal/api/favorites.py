# tourportal/api/favorites.py
import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.core.db import commit_or_conflict, get_db
from tourportal.core.errors import Conflict, NotFound
from tourportal.models.orm import Favorite
from tourportal.models.schemas import FavoriteIn, FavoriteOut, dump
from tourportal.services import catalog
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/favorites", tags=["favorites"])
logger = logging.getLogger("tourportal.api.favorites")

ALREADY_FAVORITE = "Tour is already in favorites"


@router.get("")
def list_favorites(
    session: SessionContext = Depends(require(Action.LIST_FAVORITES)),
    db: Session = Depends(get_db),
):
    favorites = (
        db.query(Favorite)
        .options(joinedload(Favorite.tour))
        .filter(Favorite.user_id == session.user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )
    return [dump(FavoriteOut, f) for f in favorites]


@router.post("", status_code=201)
def add_favorite(
    session: SessionContext = Depends(require(Action.CREATE_FAVORITE)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(FavoriteIn, payload)
    catalog.get_tour(db, data.tour_id)

    if (
        db.query(Favorite.id)
        .filter(Favorite.user_id == session.user_id, Favorite.tour_id == data.tour_id)
        .first()
    ):
        raise Conflict(ALREADY_FAVORITE)

    favorite = Favorite(user_id=session.user_id, tour_id=data.tour_id)
    db.add(favorite)
    commit_or_conflict(db, ALREADY_FAVORITE)
    db.refresh(favorite)
    return dump(FavoriteOut, favorite)


@router.delete("", status_code=204)
def remove_favorite(
    tour_id: int = Query(..., alias="tourId", gt=0),
    session: SessionContext = Depends(require(Action.DELETE_FAVORITE)),
    db: Session = Depends(get_db),
):
    favorite = (
        db.query(Favorite)
        .filter(Favorite.user_id == session.user_id, Favorite.tour_id == tour_id)
        .first()
    )
    if not favorite:
        raise NotFound("Favorite not found")
    authorize(session, Action.DELETE_FAVORITE, owner_id=favorite.user_id)

    db.delete(favorite)
    db.commit()
    return Response(status_code=204)
