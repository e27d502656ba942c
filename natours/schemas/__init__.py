"""Pydantic schemas package."""

from natours.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from natours.schemas.tour import TourCreate, TourResponse, TourUpdate, TourWithReviews
from natours.schemas.user import UserCreate, UserResponse, UserSignup

__all__ = [
    "ReviewCreate",
    "ReviewResponse",
    "ReviewUpdate",
    "TourCreate",
    "TourResponse",
    "TourUpdate",
    "TourWithReviews",
    "UserCreate",
    "UserResponse",
    "UserSignup",
]
