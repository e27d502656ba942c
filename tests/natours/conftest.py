"""Pytest fixtures for natours tests."""

import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from natours.core.middleware import rate_limiter  # noqa: E402
from natours.core.security import create_access_token, hash_password  # noqa: E402
from natours.database import Base, get_db  # noqa: E402
from natours.main import app  # noqa: E402
from natours.models.tour import Tour  # noqa: E402
from natours.models.user import User  # noqa: E402
from natours.repositories.tours import TourRepository  # noqa: E402


@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite engine shared by every connection of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup: drop all tables
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """Create a database session for testing with automatic rollback."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine,
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Generator[None, None, None]:
    """Give every test a fresh request budget."""
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(scope="function")
def test_client(test_db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override."""

    def override_get_db() -> Generator[Session, None, None]:
        """Override get_db dependency to use test database session."""
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    client = TestClient(app)

    try:
        yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def create_user(test_db_session: Session) -> Callable:
    """Factory function to create users directly in the database.

    Returns:
        Function that creates a user with given parameters and returns (user, token)

    Example:
        ```python
        def test_example(create_user):
            user, token = create_user(email="test@example.com", role="admin")
            assert user.email == "test@example.com"
        ```
    """

    def _create_user(
        email: str | None = None,
        password: str = "pass1234",
        name: str = "Test User",
        role: str = "user",
        active: bool = True,
    ) -> tuple[User, str]:
        user = User(
            id=uuid4(),
            email=email or f"user_{uuid4().hex[:12]}@example.com",
            name=name,
            password_hash=hash_password(password),
            role=role,
            active=active,
            created_at=datetime.now(timezone.utc),
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)

        token = create_access_token(user.id)

        return user, token

    return _create_user


@pytest.fixture
def tour_payload() -> Callable[..., dict[str, Any]]:
    """Builder for a valid tour creation body in API (camelCase) form."""

    def _tour_payload(**overrides: Any) -> dict[str, Any]:
        payload = {
            "name": "Mountain Trek Adventure",
            "duration": 5,
            "maxGroupSize": 10,
            "difficulty": "medium",
            "price": 1000,
            "summary": "A week in the high mountains",
            "imageCover": "tour-1-cover.jpg",
        }
        payload.update(overrides)
        return payload

    return _tour_payload


@pytest.fixture(scope="function")
def create_tour(test_db_session: Session) -> Callable[..., Tour]:
    """Factory function to create tours directly through the repository."""

    def _create_tour(**overrides: Any) -> Tour:
        data = {
            "name": f"Test Tour {uuid4().hex[:8]}",
            "duration": 5,
            "max_group_size": 10,
            "difficulty": "medium",
            "price": 500.0,
            "summary": "A test tour",
            "image_cover": "cover.jpg",
        }
        data.update(overrides)
        return TourRepository(test_db_session).create(data)

    return _create_tour
