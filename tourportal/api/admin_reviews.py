# tourportal/api/admin_reviews.py
"""
Review moderation. New reviews stay hidden from the public until approved here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.db import get_db
from tourportal.core.errors import NotFound
from tourportal.models.orm import Review
from tourportal.models.schemas import ReviewOut, dump

router = APIRouter(prefix="/api/admin/reviews", tags=["admin"])
logger = logging.getLogger("tourportal.api.admin_reviews")


def _get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFound("Review not found")
    return review


def _moderation_view(review: Review) -> dict:
    out = dump(ReviewOut, review)
    out["tour"] = {"title": review.tour.title, "slug": review.tour.slug} if review.tour else None
    out["user"] = {"name": review.user.name, "email": review.user.email} if review.user else None
    return out


@router.get("")
def list_reviews(
    approved: Optional[bool] = None,
    session: SessionContext = Depends(require(Action.MODERATE_REVIEWS)),
    db: Session = Depends(get_db),
):
    q = db.query(Review).options(joinedload(Review.tour), joinedload(Review.user))
    if approved is not None:
        q = q.filter(Review.is_approved.is_(approved))
    reviews = q.order_by(Review.created_at.desc(), Review.id.desc()).all()
    return [_moderation_view(r) for r in reviews]


@router.patch("/{review_id}/approve")
def approve_review(
    review_id: int,
    session: SessionContext = Depends(require(Action.MODERATE_REVIEWS)),
    db: Session = Depends(get_db),
):
    review = _get_review(db, review_id)
    review.is_approved = True
    db.commit()
    db.refresh(review)
    logger.info("Review %s approved by %s", review.id, session.user_id)
    return dump(ReviewOut, review)


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    session: SessionContext = Depends(require(Action.MODERATE_REVIEWS)),
    db: Session = Depends(get_db),
):
    review = _get_review(db, review_id)
    db.delete(review)
    db.commit()
    logger.info("Review %s deleted by %s", review_id, session.user_id)
    return {"ok": True}
