"""Resource descriptions consumed by the generic CRUD handlers."""

from natours.core.handler_factory import Expansion, Resource
from natours.core.query import FieldSet
from natours.models.review import Review
from natours.models.tour import Tour
from natours.models.user import User
from natours.repositories.reviews import ReviewRepository
from natours.repositories.tours import TourRepository
from natours.repositories.users import UserRepository
from natours.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from natours.schemas.tour import TourCreate, TourResponse, TourUpdate, TourWithReviews
from natours.schemas.user import UserAdminUpdate, UserCreate, UserResponse

TOUR_FIELDS = FieldSet(
    Tour,
    {
        "name": Tour.name,
        "slug": Tour.slug,
        "duration": Tour.duration,
        "maxGroupSize": Tour.max_group_size,
        "difficulty": Tour.difficulty,
        "ratingsAverage": Tour.ratings_average,
        "ratingsQuantity": Tour.ratings_quantity,
        "price": Tour.price,
        "priceDiscount": Tour.price_discount,
        "createdAt": Tour.created_at,
    },
    # Repeated keys allowed, e.g. ?duration=5&duration=9
    repeatable=("duration", "ratingsQuantity", "ratingsAverage", "maxGroupSize", "difficulty", "price"),
)

USER_FIELDS = FieldSet(
    User,
    {
        "name": User.name,
        "email": User.email,
        "role": User.role,
        "createdAt": User.created_at,
    },
)

REVIEW_FIELDS = FieldSet(
    Review,
    {
        "rating": Review.rating,
        "tour": Review.tour_id,
        "user": Review.user_id,
        "createdAt": Review.created_at,
    },
)

TOURS = Resource(
    singular="tour",
    plural="tours",
    repository=TourRepository,
    response_schema=TourResponse,
    fields=TOUR_FIELDS,
    create_schema=TourCreate,
    update_schema=TourUpdate,
    expansions={"reviews": Expansion(loader=lambda repository: repository.with_reviews(), schema=TourWithReviews)},
)

USERS = Resource(
    singular="user",
    plural="users",
    repository=UserRepository,
    response_schema=UserResponse,
    fields=USER_FIELDS,
    create_schema=UserCreate,
    update_schema=UserAdminUpdate,
)

REVIEWS = Resource(
    singular="review",
    plural="reviews",
    repository=ReviewRepository,
    response_schema=ReviewResponse,
    fields=REVIEW_FIELDS,
    create_schema=ReviewCreate,
    update_schema=ReviewUpdate,
)
