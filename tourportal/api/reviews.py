# tourportal/api/reviews.py
"""
Tour reviews.

The public sees approved reviews only; a signed-in author also sees their own
reviews while they wait for moderation.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import get_optional_session, require
from tourportal.auth.policy import Action, SessionContext, authorize
from tourportal.core.db import commit_or_conflict, get_db
from tourportal.core.errors import Conflict
from tourportal.models.orm import Review
from tourportal.models.schemas import ReviewIn, ReviewOut, dump
from tourportal.services import catalog
from tourportal.services.validation import validate_payload, json_body

router = APIRouter(prefix="/api/reviews", tags=["reviews"])
logger = logging.getLogger("tourportal.api.reviews")

DUPLICATE_REVIEW = "You have already reviewed this tour"


@router.get("")
def list_reviews(
    tour_id: int = Query(..., alias="tourId", gt=0),
    session: Optional[SessionContext] = Depends(get_optional_session),
    db: Session = Depends(get_db),
):
    authorize(session, Action.READ_PUBLIC)

    visible = Review.is_approved.is_(True)
    if session is not None:
        visible = or_(visible, Review.user_id == session.user_id)

    reviews = (
        db.query(Review)
        .options(joinedload(Review.user))
        .filter(Review.tour_id == tour_id, visible)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return [dump(ReviewOut, r) for r in reviews]


@router.post("", status_code=201)
def create_review(
    session: SessionContext = Depends(require(Action.CREATE_REVIEW)),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
):
    data = validate_payload(ReviewIn, payload)
    catalog.get_tour(db, data.tour_id)

    existing = (
        db.query(Review.id)
        .filter(Review.user_id == session.user_id, Review.tour_id == data.tour_id)
        .first()
    )
    if existing:
        raise Conflict(DUPLICATE_REVIEW)

    review = Review(
        tour_id=data.tour_id,
        user_id=session.user_id,
        rating=data.rating,
        comment=data.comment,
        is_approved=False,
    )
    db.add(review)
    # The unique constraint still catches a concurrent duplicate
    commit_or_conflict(db, DUPLICATE_REVIEW)
    db.refresh(review)

    logger.info("Review %s by %s on tour %s awaits moderation", review.id, session.user_id, data.tour_id)
    return dump(ReviewOut, review)


@router.get("/pending")
def review_status(
    tour_id: int = Query(..., alias="tourId", gt=0),
    session: SessionContext = Depends(require(Action.CHECK_REVIEW_STATUS)),
    db: Session = Depends(get_db),
):
    review = (
        db.query(Review)
        .filter(Review.user_id == session.user_id, Review.tour_id == tour_id)
        .first()
    )
    return {
        "hasPendingReview": bool(review and not review.is_approved),
        "hasApprovedReview": bool(review and review.is_approved),
    }
