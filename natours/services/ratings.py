"""Tour rating aggregate.

A tour's ``ratings_average`` and ``ratings_quantity`` belong to its reviews.
They are recomputed from scratch after every review write instead of being
incremented, so they cannot drift. The recompute runs after the review
commit and is not atomic with it: two concurrent writes on the same tour may
leave a briefly stale value that the next write corrects.
"""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from natours.models.review import Review
from natours.models.tour import DEFAULT_RATINGS_AVERAGE, Tour

logger = logging.getLogger(__name__)


def recompute_tour_rating(db: Session, tour_id: UUID) -> Tour | None:
    """Recompute and store the rating average and count of a tour.

    Args:
        db: Database session
        tour_id: Tour whose reviews changed

    Returns:
        The updated tour, or None if it no longer exists
    """
    quantity, average = (
        db.query(func.count(Review.id), func.avg(Review.rating))
        .filter(Review.tour_id == tour_id)
        .one()
    )

    tour = db.query(Tour).filter(Tour.id == tour_id).first()
    if tour is None:
        return None

    tour.ratings_quantity = quantity
    tour.ratings_average = float(average) if quantity and average is not None else DEFAULT_RATINGS_AVERAGE
    db.commit()
    db.refresh(tour)

    logger.info(
        f"Recomputed rating for tour {tour_id}: average={tour.ratings_average} quantity={tour.ratings_quantity}"
    )
    return tour
