"""Generic persistence operations shared by every entity."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from natours.core.errors import AppError
from natours.database import Base


ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Create/read/update/delete for one mapped class.

    Subclasses narrow ``query`` (soft delete, eager loads) and extend the
    write methods with entity rules. Writes commit immediately.
    """

    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def query(self) -> Query:
        """Base query for single-record reads."""
        return self.db.query(self.model)

    def list_query(self) -> Query:
        """Base query for list endpoints."""
        return self.query()

    def get(self, record_id: UUID, query: Query | None = None) -> ModelT | None:
        query = query if query is not None else self.query()
        return query.filter(self.model.id == record_id).first()

    def create(self, data: dict[str, Any]) -> ModelT:
        return self.save(self.model(**data))

    def update(self, record: ModelT, changes: dict[str, Any]) -> ModelT:
        columns = self.model.__table__.columns
        for key, value in changes.items():
            if value is None and key in columns and not columns[key].nullable:
                # An explicit null cannot clear a required field
                continue
            setattr(record, key, value)
        try:
            self.validate(record)
        except AppError:
            # Discard the half-applied changes
            self.db.rollback()
            raise
        return self.save(record)

    def delete(self, record: ModelT) -> None:
        self.db.delete(record)
        self.db.commit()

    def validate(self, record: ModelT) -> None:
        """Check cross-field rules against the merged record before it is saved."""

    def save(self, record: ModelT) -> ModelT:
        """Add, commit and refresh a record.

        Raises:
            IntegrityError: On unique or foreign key violations, after rolling back
        """
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record
