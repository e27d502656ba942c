"""User schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from natours.schemas.base import CamelModel, strip_string

RoleName = Literal["user", "guide", "lead-guide", "admin"]


class UserSignup(CamelModel):
    """User signup request schema."""

    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)
    password_confirm: str

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize name by stripping whitespace."""
        return strip_string(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lowercased."""
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def passwords_match(self) -> "UserSignup":
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same!")
        return self


class UserCreate(UserSignup):
    """Admin user creation schema."""

    photo: str = "default.jpg"
    role: RoleName = "user"


class UserLogin(CamelModel):
    """User login request schema. Missing fields are reported by the handler."""

    email: str | None = None
    password: str | None = None


class UserMeUpdate(CamelModel):
    """Self-service profile update. Password fields are only declared to be rejected."""

    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    password: str | None = None
    password_confirm: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        """Normalize name by stripping whitespace."""
        return strip_string(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if isinstance(v, str) else v


class UserAdminUpdate(CamelModel):
    """Admin update schema. Passwords cannot be changed through it."""

    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    photo: str | None = None
    role: RoleName | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if isinstance(v, str) else v


class ForgotPassword(CamelModel):
    email: EmailStr


class PasswordReset(CamelModel):
    """New password, as sent to the reset endpoint."""

    password: str = Field(..., min_length=8)
    password_confirm: str

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordReset":
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same!")
        return self


class PasswordUpdate(PasswordReset):
    """Password change for a logged in user, proven with the current one."""

    password_current: str


class UserResponse(CamelModel):
    """User response schema."""

    id: UUID
    name: str
    email: str
    photo: str
    role: str
    created_at: datetime


class UserPublic(CamelModel):
    """Author fields embedded in reviews."""

    id: UUID
    name: str
    photo: str


class GuideResponse(UserPublic):
    """Guide fields embedded in tours."""

    email: str
    role: str
