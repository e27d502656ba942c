"""Tour schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from natours.schemas.base import CamelModel, strip_string
from natours.schemas.review import ReviewResponse
from natours.schemas.user import GuideResponse

Difficulty = Literal["easy", "medium", "difficult"]


class Location(CamelModel):
    """GeoJSON point with an optional address, description and itinerary day."""

    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(..., min_length=2, max_length=2, description="[longitude, latitude]")
    address: str | None = None
    description: str | None = None
    day: int | None = None

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[float]) -> list[float]:
        lng, lat = v
        if not (-180 <= lng <= 180 and -90 <= lat <= 90):
            raise ValueError("Coordinates must be [longitude, latitude] within range")
        return v


class TourCreate(CamelModel):
    """Tour creation request schema. Rating fields are derived and not accepted."""

    name: str = Field(..., min_length=10, max_length=40)
    duration: int = Field(..., gt=0)
    max_group_size: int = Field(..., gt=0)
    difficulty: Difficulty
    price: float = Field(..., gt=0)
    price_discount: float | None = Field(default=None, ge=0)
    summary: str = Field(..., min_length=1)
    description: str | None = None
    image_cover: str = Field(..., min_length=1)
    images: list[str] = Field(default_factory=list)
    start_dates: list[datetime] = Field(default_factory=list)
    secret_tour: bool = False
    start_location: Location | None = None
    locations: list[Location] = Field(default_factory=list)
    guides: list[UUID] = Field(default_factory=list)

    @field_validator("name", "summary", "description", mode="before")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        """Normalize text by stripping whitespace."""
        return strip_string(v)

    @model_validator(mode="after")
    def discount_below_price(self) -> "TourCreate":
        if self.price_discount is not None and self.price_discount >= self.price:
            raise ValueError(f"Discount price ({self.price_discount}) should be below regular price")
        return self


class TourUpdate(CamelModel):
    """Partial tour update. Cross-field checks against the stored tour run in the repository."""

    name: str | None = Field(default=None, min_length=10, max_length=40)
    duration: int | None = Field(default=None, gt=0)
    max_group_size: int | None = Field(default=None, gt=0)
    difficulty: Difficulty | None = None
    price: float | None = Field(default=None, gt=0)
    price_discount: float | None = Field(default=None, ge=0)
    summary: str | None = Field(default=None, min_length=1)
    description: str | None = None
    image_cover: str | None = Field(default=None, min_length=1)
    images: list[str] | None = None
    start_dates: list[datetime] | None = None
    secret_tour: bool | None = None
    start_location: Location | None = None
    locations: list[Location] | None = None
    guides: list[UUID] | None = None

    @field_validator("name", "summary", "description", mode="before")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        """Normalize text by stripping whitespace."""
        return strip_string(v)

    @model_validator(mode="after")
    def discount_below_price(self) -> "TourUpdate":
        if self.price is not None and self.price_discount is not None and self.price_discount >= self.price:
            raise ValueError(f"Discount price ({self.price_discount}) should be below regular price")
        return self


class TourResponse(CamelModel):
    """Tour response schema."""

    id: UUID
    name: str
    slug: str
    duration: int
    duration_weeks: float
    max_group_size: int
    difficulty: str
    ratings_average: float
    ratings_quantity: int
    price: float
    price_discount: float | None
    summary: str
    description: str | None
    image_cover: str
    images: list[str]
    start_dates: list[datetime]
    secret_tour: bool
    start_location: Location | None
    locations: list[Location]
    guides: list[GuideResponse]
    created_at: datetime


class TourWithReviews(TourResponse):
    """Tour response with its reviews expanded."""

    reviews: list[ReviewResponse]


class TourStats(CamelModel):
    """Per-difficulty statistics for highly rated tours."""

    difficulty: str
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class MonthlyPlan(CamelModel):
    """Tour starts within one month of a year."""

    month: int
    num_tour_starts: int
    tours: list[str]


class TourDistance(CamelModel):
    """Distance from a point to a tour's start location."""

    id: UUID
    name: str
    distance: float
