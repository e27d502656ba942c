"""Tour persistence."""

from datetime import datetime
from typing import Any
from uuid import UUID

from slugify import slugify
from sqlalchemy.orm import Query, selectinload

from natours.core.errors import ValidationError
from natours.models.review import Review
from natours.models.tour import Tour
from natours.models.user import User
from natours.repositories.base import Repository


class TourRepository(Repository[Tour]):
    """Tours. Slugs follow names; secret tours stay out of listings."""

    model = Tour

    def list_query(self) -> Query:
        return self.find_public_tours()

    def find_public_tours(self) -> Query:
        return self.db.query(Tour).filter(Tour.secret_tour.is_(False))

    def with_reviews(self) -> Query:
        return self.db.query(Tour).options(selectinload(Tour.reviews).selectinload(Review.user))

    def create(self, data: dict[str, Any]) -> Tour:
        data = _json_ready(data)
        guide_ids = data.pop("guides", [])
        tour = Tour(**data)
        tour.guides = self._resolve_guides(guide_ids)
        tour.slug = slugify(tour.name)
        self.validate(tour)
        return self.save(tour)

    def update(self, record: Tour, changes: dict[str, Any]) -> Tour:
        changes = _json_ready(changes)
        if "guides" in changes:
            record.guides = self._resolve_guides(changes.pop("guides"))
        if changes.get("name"):
            changes["slug"] = slugify(changes["name"])
        return super().update(record, changes)

    def validate(self, record: Tour) -> None:
        if record.price_discount is not None and record.price_discount >= record.price:
            raise ValidationError(
                f"Invalid input data. Discount price ({record.price_discount}) should be below regular price"
            )

    def _resolve_guides(self, guide_ids: list[Any]) -> list[User]:
        if not guide_ids:
            return []
        ids = [UUID(str(guide_id)) for guide_id in guide_ids]
        guides = self.db.query(User).filter(User.id.in_(ids), User.active.is_(True)).all()
        if len(guides) != len(set(ids)):
            raise ValidationError("Invalid input data. Every guide must reference an existing user")
        return guides


def _json_ready(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` with start dates as ISO-8601 strings for the JSON column."""
    data = dict(data)
    if data.get("start_dates") is not None:
        data["start_dates"] = [
            value.isoformat() if isinstance(value, datetime) else value for value in data["start_dates"]
        ]
    return data
