"""Users router: the logged in user's profile and admin user management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from natours.core.dependencies import get_current_user, require_permission
from natours.core.errors import BadRequestError
from natours.core.handler_factory import Parent, create_one, delete_one, get_all, get_one, update_one
from natours.core.permissions import Permission
from natours.core.responses import no_content, serialize, success
from natours.database import get_db
from natours.models.review import Review
from natours.models.user import User
from natours.repositories.users import UserRepository
from natours.resources import REVIEWS, USERS
from natours.schemas.user import UserMeUpdate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])

# Fields a user may change on their own profile
SELF_UPDATABLE_FIELDS = {"name", "email"}


@router.get("/me")
async def get_me(current_user: Annotated[User, Depends(get_current_user)]) -> JSONResponse:
    """Return the logged in user's profile."""
    return success("user", serialize(UserResponse, current_user))


@router.patch("/updateMe")
async def update_me(
    payload: UserMeUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Update the logged in user's name and email.

    Raises:
        BadRequestError: If the body tries to change the password
    """
    if payload.password is not None or payload.password_confirm is not None:
        raise BadRequestError("This route is not for password updates. Please use /updateMyPassword.")

    changes = payload.model_dump(exclude_unset=True, include=SELF_UPDATABLE_FIELDS)
    user = UserRepository(db).update(current_user, changes)
    return success("user", serialize(UserResponse, user))


@router.delete("/deleteMe", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Deactivate the logged in user. The record is kept."""
    UserRepository(db).deactivate(current_user)
    logger.info(f"User {current_user.id} deactivated their account")
    return no_content()


# Reviews written by a user
router.add_api_route(
    "/{user_id}/reviews",
    get_all(REVIEWS, parent=Parent("user_id", Review.user_id)),
    methods=["GET"],
    tags=["reviews"],
)

_admin = [Depends(require_permission(Permission.MANAGE_USERS))]

router.add_api_route("", get_all(USERS), methods=["GET"], dependencies=_admin)
router.add_api_route(
    "",
    create_one(USERS),
    methods=["POST"],
    status_code=status.HTTP_201_CREATED,
    dependencies=_admin,
)
router.add_api_route("/{id}", get_one(USERS), methods=["GET"], dependencies=_admin)
router.add_api_route("/{id}", update_one(USERS), methods=["PATCH"], dependencies=_admin)
router.add_api_route(
    "/{id}",
    delete_one(USERS),
    methods=["DELETE"],
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_admin,
)
