"""Database models package."""

from natours.models.review import Review
from natours.models.tour import Tour
from natours.models.user import User

__all__ = ["User", "Tour", "Review"]
