"""Review persistence."""

from typing import Any

from sqlalchemy.orm import Query, selectinload

from natours.core.errors import NotFoundError, ValidationError
from natours.models.review import Review
from natours.models.tour import Tour
from natours.repositories.base import Repository
from natours.services.ratings import recompute_tour_rating


class ReviewRepository(Repository[Review]):
    """Reviews, always loaded with their author; writes refresh the tour rating."""

    model = Review

    def query(self) -> Query:
        return self.find_reviews_with_author()

    def find_reviews_with_author(self) -> Query:
        return self.db.query(Review).options(selectinload(Review.user))

    def create(self, data: dict[str, Any]) -> Review:
        """Create a review on an existing tour.

        The tour may be given as ``tour`` (request body) or ``tour_id`` (nested route).
        A tour named in the body takes precedence over the one in the URL.

        Raises:
            ValidationError: If no tour was given
            NotFoundError: If the tour does not exist
        """
        data = dict(data)
        tour_id = data.pop("tour", None) or data.pop("tour_id", None)
        data.pop("tour_id", None)
        if tour_id is None:
            raise ValidationError("Invalid input data. Review must belong to a tour.")
        if self.db.query(Tour.id).filter(Tour.id == tour_id).first() is None:
            raise NotFoundError("tour")

        review = self.save(Review(**data, tour_id=tour_id))
        recompute_tour_rating(self.db, review.tour_id)
        return review

    def update(self, record: Review, changes: dict[str, Any]) -> Review:
        review = super().update(record, changes)
        recompute_tour_rating(self.db, review.tour_id)
        return review

    def delete(self, record: Review) -> None:
        tour_id = record.tour_id
        super().delete(record)
        recompute_tour_rating(self.db, tour_id)
