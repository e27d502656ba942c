"""FastAPI dependencies for authentication and authorization."""

from typing import Annotated, Callable
from uuid import UUID

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from natours.core.errors import AuthenticationError
from natours.core.permissions import Permission, authorize
from natours.core.security import decode_access_token
from natours.database import get_db
from natours.models.user import User
from natours.repositories.users import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def get_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    jwt: Annotated[str | None, Cookie()] = None,
) -> str:
    """Extract the access token from the Authorization header, falling back to the jwt cookie.

    Raises:
        AuthenticationError: If no token was sent
    """
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    if jwt:
        return jwt
    raise AuthenticationError()


def get_current_user(
    token: Annotated[str, Depends(get_token)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Resolve the authenticated user for a request.

    The token must verify, its subject must be an existing active user, and
    it must have been issued after that user's last password change.

    Raises:
        AuthenticationError: At the first step that fails
    """
    payload = decode_access_token(token)

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as e:
        raise AuthenticationError("Invalid token. Please log in again!") from e

    user = UserRepository(db).get_active(user_id)
    if user is None:
        raise AuthenticationError("The user belonging to this token does no longer exist.")

    if user.changed_password_after(int(payload.get("iat", 0))):
        raise AuthenticationError("User recently changed password! Please log in again.")

    return user


def require_permission(permission: Permission) -> Callable[..., User]:
    """Build a dependency that authenticates the caller and checks ``permission``.

    Example:
        ```python
        @router.delete("/{tour_id}")
        def delete_tour(user: Annotated[User, Depends(require_permission(Permission.MANAGE_TOURS))]):
            ...
        ```
    """

    def permission_dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        authorize(current_user, permission)
        return current_user

    return permission_dependency
