"""Tour model."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import relationship

from natours.database import Base

DIFFICULTIES = ("easy", "medium", "difficult")
DEFAULT_RATINGS_AVERAGE = 4.5

tour_guides = Table(
    "tour_guides",
    Base.metadata,
    Column("tour_id", Uuid(as_uuid=True), ForeignKey("tours.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Tour(Base):
    """Tour model for the bookable tours catalogue."""

    __tablename__ = "tours"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(40), unique=True, nullable=False)
    slug = Column(String(255), index=True, nullable=False)
    duration = Column(Integer, nullable=False)
    max_group_size = Column(Integer, nullable=False)
    difficulty = Column(String(20), nullable=False)
    # Derived from the tour's reviews, see natours.services.ratings
    ratings_average = Column(Float, default=DEFAULT_RATINGS_AVERAGE, nullable=False)
    ratings_quantity = Column(Integer, default=0, nullable=False)
    price = Column(Float, nullable=False)
    price_discount = Column(Float, nullable=True)
    summary = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    image_cover = Column(String(255), nullable=False)
    images = Column(JSON, default=list, nullable=False)
    start_dates = Column(JSON, default=list, nullable=False)  # ISO-8601 strings
    secret_tour = Column(Boolean, default=False, nullable=False)
    start_location = Column(JSON, nullable=True)  # {"type": "Point", "coordinates": [lng, lat], ...}
    locations = Column(JSON, default=list, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    guides = relationship("User", secondary=tour_guides, lazy="selectin")
    reviews = relationship(
        "Review",
        back_populates="tour",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def duration_weeks(self) -> float:
        return self.duration / 7

    def __repr__(self) -> str:
        """String representation of Tour."""
        return f"<Tour(id={self.id}, name={self.name}, slug={self.slug})>"
