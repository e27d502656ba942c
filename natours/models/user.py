"""User model."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from natours.database import Base

ROLES = ("user", "guide", "lead-guide", "admin")


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    photo = Column(String(255), default="default.jpg", nullable=False)
    role = Column(String(50), default="user", nullable=False)
    password_hash = Column(String(255), nullable=False)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    # Only the sha256 digest of a reset token is stored
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def changed_password_after(self, issued_at: int) -> bool:
        """Return True if the password changed after a token issued at ``issued_at`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        changed_at = self.password_changed_at
        if changed_at.tzinfo is None:
            # SQLite drops tzinfo on the way back
            changed_at = changed_at.replace(tzinfo=timezone.utc)
        return int(changed_at.timestamp()) > issued_at

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
