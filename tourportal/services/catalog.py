# tourportal/services/catalog.py
"""
Catalog rules: lookups, slug uniqueness, writes, the two destination delete
policies, the manager tour delete and popularity queries.
"""

import logging
from typing import Dict, List, Optional, Type

from sqlalchemy import func
from sqlalchemy.orm import Session

from tourportal.core.db import commit_or_conflict
from tourportal.core.errors import Conflict, InvalidOperation, NotFound
from tourportal.models.orm import Destination, Favorite, Order, Review, Tour
from tourportal.services.ranking import PopularityEntry, rank_destinations, rank_tours, top

logger = logging.getLogger("tourportal.catalog")


# ---------- Lookups ----------
def get_destination(db: Session, destination_id: int) -> Destination:
    destination = db.query(Destination).filter(Destination.id == destination_id).first()
    if not destination:
        raise NotFound("Destination not found")
    return destination


def get_tour(db: Session, tour_id: int) -> Tour:
    tour = db.query(Tour).filter(Tour.id == tour_id).first()
    if not tour:
        raise NotFound("Tour not found")
    return tour


def ensure_slug_free(db: Session, model: Type, slug: str, exclude_id: Optional[int] = None) -> None:
    """Raise Conflict when another row of `model` already uses `slug`."""
    q = db.query(model).filter(model.slug == slug)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    if q.first():
        raise Conflict(f"Slug '{slug}' is already taken")


def ensure_destination_exists(db: Session, destination_id: int) -> None:
    if not db.query(Destination.id).filter(Destination.id == destination_id).first():
        raise NotFound("Destination not found")


# ---------- Deletes ----------
def delete_destination_cascade(db: Session, destination: Destination) -> Dict[str, int]:
    """
    Admin path: remove the destination together with its tours and their
    reviews and favorites. Orders of those tours are kept, detached from the tour.
    """
    slug = destination.slug
    tours = list(destination.tours)
    tour_ids = [t.id for t in tours]
    review_count = 0
    if tour_ids:
        review_count = db.query(func.count(Review.id)).filter(Review.tour_id.in_(tour_ids)).scalar() or 0

    for tour in tours:
        db.delete(tour)
    db.flush()
    # Reload the now empty collection so the destination delete does not touch the removed tours
    db.expire(destination, ["tours"])
    db.delete(destination)
    db.commit()

    logger.info(
        "Destination %s deleted with %d tours and %d reviews",
        slug, len(tours), review_count,
    )
    return {"deletedTours": len(tours), "deletedReviews": review_count}


def delete_destination_if_empty(db: Session, destination: Destination) -> None:
    """Manager path: refuse while any tour still points at the destination."""
    tour_count = db.query(func.count(Tour.id)).filter(Tour.destination_id == destination.id).scalar() or 0
    if tour_count > 0:
        raise InvalidOperation(
            "Cannot delete a destination that still has tours",
            tourCount=tour_count,
        )
    slug = destination.slug
    db.delete(destination)
    db.commit()
    logger.info("Destination %s deleted", slug)


def delete_tour_cancelling_orders(db: Session, tour: Tour) -> Dict[str, int]:
    """Cancel the tour's orders, drop its reviews and favorites, then the tour."""
    slug = tour.slug
    cancelled = (
        db.query(Order)
        .filter(Order.tour_id == tour.id, Order.status != "CANCELLED")
        .update({Order.status: "CANCELLED"}, synchronize_session=False)
    )
    reviews = db.query(Review).filter(Review.tour_id == tour.id).delete(synchronize_session=False)
    favorites = db.query(Favorite).filter(Favorite.tour_id == tour.id).delete(synchronize_session=False)
    db.delete(tour)
    db.commit()

    logger.info(
        "Tour %s deleted: %d orders cancelled, %d reviews removed",
        slug, cancelled, reviews,
    )
    return {"cancelledOrders": cancelled, "deletedReviews": reviews, "deletedFavorites": favorites}


# ---------- Popularity ----------
def _completed_orders_by_tour(db: Session) -> Dict[int, int]:
    rows = (
        db.query(Order.tour_id, func.count(Order.id))
        .filter(Order.status == "COMPLETED", Order.tour_id.isnot(None))
        .group_by(Order.tour_id)
        .all()
    )
    return {tour_id: count for tour_id, count in rows}


def popular_destinations(db: Session, limit: int) -> List[PopularityEntry]:
    counts = _completed_orders_by_tour(db)
    destinations = db.query(Destination).order_by(Destination.name.asc()).all()

    entries = []
    for d in destinations:
        entries.append(
            PopularityEntry(
                item=d,
                order_count=sum(counts.get(t.id, 0) for t in d.tours),
                tour_count=len(d.tours),
            )
        )
    return top(rank_destinations(entries), limit)


def popular_tours(db: Session, tours: List[Tour], limit: int) -> List[PopularityEntry]:
    """Rank an already ordered list of tours."""
    counts = _completed_orders_by_tour(db)
    entries = [PopularityEntry(item=t, order_count=counts.get(t.id, 0)) for t in tours]
    return top(rank_tours(entries), limit)


# ---------- Writes ----------
def save_destination(db: Session, destination: Destination, data) -> Destination:
    """Copy validated fields onto `destination` (new or existing) and commit."""
    ensure_slug_free(db, Destination, data.slug, exclude_id=destination.id)
    destination.name = data.name
    destination.slug = data.slug
    destination.description = data.description
    destination.image_url = str(data.image_url)
    if destination.id is None:
        db.add(destination)
    commit_or_conflict(db, f"Slug '{data.slug}' is already taken")
    db.refresh(destination)
    return destination


TOUR_FIELDS = (
    "title", "slug", "price", "currency", "image_url", "image_urls",
    "short_description", "full_description", "inclusions", "exclusions",
    "itinerary", "destination_id", "duration", "group_size", "next_tour_date",
)


def save_tour(db: Session, tour: Tour, data) -> Tour:
    ensure_slug_free(db, Tour, data.slug, exclude_id=tour.id)
    ensure_destination_exists(db, data.destination_id)
    for name in TOUR_FIELDS:
        setattr(tour, name, getattr(data, name))
    # Admin form has no seat count; a new tour then starts with one seat per group place
    seats = getattr(data, "available_seats", None)
    if seats is not None:
        tour.available_seats = seats
    elif tour.id is None:
        tour.available_seats = data.group_size
    if tour.id is None:
        db.add(tour)
    commit_or_conflict(db, f"Slug '{data.slug}' is already taken")
    db.refresh(tour)
    return tour


def tour_counts(db: Session) -> Dict[int, int]:
    rows = db.query(Tour.destination_id, func.count(Tour.id)).group_by(Tour.destination_id).all()
    return {destination_id: count for destination_id, count in rows}
