"""Reviews router, including the nested ``/tours/{tour_id}/reviews`` routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status

from natours.core.dependencies import require_permission
from natours.core.handler_factory import Parent, create_one, delete_one, get_all, get_one, parse_id, update_one
from natours.core.permissions import Permission
from natours.models.review import Review
from natours.models.user import User
from natours.resources import REVIEWS

router = APIRouter(prefix="/api/v1", tags=["reviews"])


def review_context(
    request: Request,
    current_user: Annotated[User, Depends(require_permission(Permission.CREATE_REVIEW))],
) -> dict[str, Any]:
    """Author a new review as the current user, on the tour from the URL when nested."""
    context: dict[str, Any] = {"user_id": current_user.id}
    if "tour_id" in request.path_params:
        context["tour_id"] = parse_id(request.path_params["tour_id"])
    return context


list_reviews = get_all(REVIEWS, parent=Parent("tour_id", Review.tour_id))
create_review = create_one(REVIEWS, context=review_context)

for path in ("/reviews", "/tours/{tour_id}/reviews"):
    router.add_api_route(path, list_reviews, methods=["GET"])
    router.add_api_route(path, create_review, methods=["POST"], status_code=status.HTTP_201_CREATED)

_modify_review = [Depends(require_permission(Permission.MODIFY_REVIEW))]

router.add_api_route("/reviews/{id}", get_one(REVIEWS), methods=["GET"])
router.add_api_route("/reviews/{id}", update_one(REVIEWS), methods=["PATCH"], dependencies=_modify_review)
router.add_api_route(
    "/reviews/{id}",
    delete_one(REVIEWS),
    methods=["DELETE"],
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_modify_review,
)
