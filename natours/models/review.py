"""Review model."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import backref, relationship

from natours.database import Base


class Review(Base):
    """Review left by a user on a tour."""

    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_reviews_rating"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    review = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    tour_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    tour = relationship("Tour", back_populates="reviews")
    user = relationship("User", backref=backref("reviews", cascade="all, delete-orphan", passive_deletes=True))

    def __repr__(self) -> str:
        """String representation of Review."""
        return f"<Review(id={self.id}, tour_id={self.tour_id}, user_id={self.user_id}, rating={self.rating})>"
