"""Authentication router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from natours.config import settings
from natours.core.dependencies import get_current_user
from natours.core.email import EmailError, send_email
from natours.core.errors import AppError, AuthenticationError, BadRequestError
from natours.core.responses import serialize
from natours.core.security import (
    create_access_token,
    create_password_reset_token,
    hash_reset_token,
    verify_password,
)
from natours.database import get_db
from natours.models.user import User
from natours.repositories.users import UserRepository
from natours.schemas.user import ForgotPassword, PasswordReset, PasswordUpdate, UserLogin, UserResponse, UserSignup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["auth"])

COOKIE_NAME = "jwt"


def send_token(user: User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Issue a token for ``user``, return it with the sanitized user and set it as a cookie."""
    token = create_access_token(user.id)
    response = JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "token": token,
            "data": {"user": serialize(UserResponse, user)},
        },
    )
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.jwt_cookie_expires_in_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserSignup,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Create a new user account and log it in.

    Args:
        user_data: Signup data (name, email, password, passwordConfirm)
        db: Database session

    Returns:
        JSONResponse: Token and created user

    Raises:
        BadRequestError: If the email is already registered
    """
    users = UserRepository(db)
    if users.query(include_inactive=True).filter(User.email == user_data.email).first() is not None:
        raise BadRequestError("Email already registered")

    new_user = users.create(user_data.model_dump(include={"name", "email", "password"}))
    logger.info(f"New user signed up: {new_user.id}")
    return send_token(new_user, status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    user_data: UserLogin,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Authenticate a user and return an access token.

    Raises:
        BadRequestError: If email or password is missing
        AuthenticationError: If the credentials don't match an active user
    """
    if not user_data.email or not user_data.password:
        raise BadRequestError("Please provide email and password!")

    user = UserRepository(db).find_by_email(user_data.email)
    if user is None or not verify_password(user_data.password, user.password_hash):
        raise AuthenticationError("Incorrect email or password")

    return send_token(user)


@router.get("/logout")
async def logout() -> JSONResponse:
    """Overwrite the jwt cookie with a short-lived dummy value."""
    response = JSONResponse(content={"status": "success"})
    response.set_cookie(COOKIE_NAME, "loggedout", max_age=10, httponly=True)
    return response


@router.post("/forgotPassword")
async def forgot_password(
    payload: ForgotPassword,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Email a one-time password reset link.

    Only the digest of the token is stored; it expires after
    ``password_reset_expires_minutes``.

    Raises:
        AppError: 404 for an unknown email, 500 if the email cannot be sent
    """
    users = UserRepository(db)
    user = users.find_by_email(payload.email)
    if user is None:
        raise AppError("There is no user with that email address.", status.HTTP_404_NOT_FOUND)

    token, hashed_token, expires = create_password_reset_token()
    users.set_reset_token(user, hashed_token, expires)

    reset_url = f"{str(request.base_url).rstrip('/')}{router.prefix}/resetPassword/{token}"
    message = (
        "Forgot your password? Submit a PATCH request with your new password and passwordConfirm to: "
        f"{reset_url}\nIf you didn't forget your password, please ignore this email!"
    )

    try:
        send_email(
            to=user.email,
            subject=f"Your password reset token (valid for {settings.password_reset_expires_minutes} min)",
            message=message,
        )
    except EmailError as e:
        users.set_reset_token(user, None, None)
        logger.error(f"Password reset email failed for user {user.id}: {e}")
        raise AppError(
            "There was an error sending the email. Try again later!",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e

    return JSONResponse(content={"status": "success", "message": "Token sent to email!"})


@router.patch("/resetPassword/{token}")
async def reset_password(
    token: str,
    payload: PasswordReset,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Set a new password using a reset token.

    Raises:
        BadRequestError: If the token is unknown, already used or expired
    """
    users = UserRepository(db)
    user = users.find_by_reset_token(hash_reset_token(token))
    if user is None:
        raise BadRequestError("Token is invalid or has expired")

    users.set_password(user, payload.password)
    return send_token(user)


@router.patch("/updateMyPassword")
async def update_my_password(
    payload: PasswordUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Change the password of the logged in user.

    Raises:
        AuthenticationError: If the current password is wrong
    """
    if not verify_password(payload.password_current, current_user.password_hash):
        raise AuthenticationError("Your current password is wrong.")

    UserRepository(db).set_password(current_user, payload.password)
    return send_token(current_user)
