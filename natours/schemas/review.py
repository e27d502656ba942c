"""Review schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field, field_validator

from natours.schemas.base import CamelModel, strip_string
from natours.schemas.user import UserPublic


class ReviewCreate(CamelModel):
    """Review creation request schema.

    The tour may come from the URL instead of the body. The author is always
    the authenticated user.
    """

    review: str = Field(..., min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)
    tour: UUID | None = Field(default=None, validation_alias=AliasChoices("tour", "tourId", "tour_id"))

    @field_validator("review", mode="before")
    @classmethod
    def normalize_review(cls, v: str) -> str:
        """Normalize review text by stripping whitespace."""
        return strip_string(v)


class ReviewUpdate(CamelModel):
    """Review update request schema."""

    review: str | None = Field(default=None, min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)

    @field_validator("review", mode="before")
    @classmethod
    def normalize_review(cls, v: str | None) -> str | None:
        """Normalize review text by stripping whitespace."""
        return strip_string(v)


class ReviewResponse(CamelModel):
    """Review response schema with the author expanded."""

    id: UUID
    review: str
    rating: int | None
    tour: UUID = Field(validation_alias=AliasChoices("tour_id", "tour"))
    user: UserPublic
    created_at: datetime
