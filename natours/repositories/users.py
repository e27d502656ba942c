"""User persistence."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Query

from natours.core.security import hash_password
from natours.models.review import Review
from natours.models.user import User
from natours.repositories.base import Repository
from natours.services.ratings import recompute_tour_rating

# Backdate password changes so a token issued in the same second stays valid
PASSWORD_CHANGE_SKEW = timedelta(seconds=1)


class UserRepository(Repository[User]):
    """Users. Deactivated accounts are invisible unless asked for explicitly."""

    model = User

    def query(self, include_inactive: bool = False) -> Query:
        if include_inactive:
            return self.db.query(User)
        return self.find_active_users()

    def find_active_users(self) -> Query:
        return self.db.query(User).filter(User.active.is_(True))

    def get_active(self, user_id: UUID) -> User | None:
        return self.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        return self.query().filter(User.email == email.lower()).first()

    def find_by_reset_token(self, hashed_token: str) -> User | None:
        """Find the user owning an unexpired reset token digest."""
        return (
            self.query()
            .filter(
                User.password_reset_token == hashed_token,
                User.password_reset_expires > datetime.now(timezone.utc),
            )
            .first()
        )

    def create(self, data: dict[str, Any]) -> User:
        data = dict(data)
        data.pop("password_confirm", None)
        password = data.pop("password")
        return self.save(User(**data, password_hash=hash_password(password)))

    def set_password(self, user: User, password: str) -> User:
        """Replace a user's password, invalidating tokens issued before now."""
        user.password_hash = hash_password(password)
        user.password_changed_at = datetime.now(timezone.utc) - PASSWORD_CHANGE_SKEW
        user.password_reset_token = None
        user.password_reset_expires = None
        return self.save(user)

    def set_reset_token(self, user: User, hashed_token: str | None, expires: datetime | None) -> User:
        user.password_reset_token = hashed_token
        user.password_reset_expires = expires
        return self.save(user)

    def deactivate(self, user: User) -> User:
        user.active = False
        return self.save(user)

    def delete(self, record: User) -> None:
        """Hard delete a user along with their reviews, then refresh the affected tour ratings."""
        tour_ids = {tour_id for (tour_id,) in self.db.query(Review.tour_id).filter(Review.user_id == record.id)}
        super().delete(record)
        for tour_id in tour_ids:
            recompute_tour_rating(self.db, tour_id)
