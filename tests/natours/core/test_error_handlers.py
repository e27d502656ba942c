"""Tests for the failure envelope produced by the error handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from natours.config import settings
from natours.core.error_handlers import register_error_handlers
from natours.core.errors import AppError, NotFoundError


@pytest.fixture
def error_client() -> TestClient:
    """Client for a small app whose routes raise on purpose."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/operational")
    async def operational() -> None:
        raise NotFoundError("tour")

    @app.get("/server-operational")
    async def server_operational() -> None:
        raise AppError("There was an error sending the email. Try again later!")

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("database exploded")

    return TestClient(app, raise_server_exceptions=False)


def test_operational_error_keeps_message(error_client: TestClient):
    """Test that operational errors are rendered with their own status and message."""
    response = error_client.get("/operational")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "No tour found with that ID"}


def test_server_side_operational_error_has_error_status(error_client: TestClient):
    """Test that 5xx operational errors use the error status."""
    response = error_client.get("/server-operational")

    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": "There was an error sending the email. Try again later!",
    }


def test_unexpected_error_in_development(error_client: TestClient, monkeypatch):
    """Test that development responses carry the error details."""
    monkeypatch.setattr(settings, "app_env", "development")

    response = error_client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["status"] == "error"
    assert body["message"] == "database exploded"
    assert body["error"] == "RuntimeError"
    assert body["stack"]


def test_unexpected_error_in_production(error_client: TestClient, monkeypatch):
    """Test that production responses hide the error details."""
    monkeypatch.setattr(settings, "app_env", "production")

    response = error_client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Something went very wrong!"}


def test_unknown_route(test_client: TestClient):
    """Test that unknown routes answer 404 in the failure envelope."""
    response = test_client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Can't find /api/v1/nothing-here on this server!"}


def test_invalid_id(test_client: TestClient):
    """Test that a malformed id is a 400, not a 404 or 500."""
    response = test_client.get("/api/v1/tours/not-a-uuid")

    assert response.status_code == 400
    assert response.json() == {"status": "fail", "message": "Invalid id: not-a-uuid"}


def test_missing_record(test_client: TestClient):
    """Test that a well-formed unknown id is a 404."""
    response = test_client.get("/api/v1/tours/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
    assert response.json()["message"] == "No tour found with that ID"


def test_request_validation_error(test_client: TestClient):
    """Test that schema validation failures are 400 with a readable message."""
    response = test_client.post(
        "/api/v1/users/signup",
        json={"name": "Jonas", "email": "jonas@example.com", "password": "pass1234", "passwordConfirm": "nope1234"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    assert body["message"].startswith("Invalid input data.")
    assert "Passwords are not the same!" in body["message"]


def test_duplicate_value(test_client: TestClient, create_user, tour_payload):
    """Test that unique constraint violations are reported as duplicates."""
    _, token = create_user(role="admin")
    headers = {"Authorization": f"Bearer {token}"}

    assert test_client.post("/api/v1/tours", json=tour_payload(), headers=headers).status_code == 201
    response = test_client.post("/api/v1/tours", json=tour_payload(), headers=headers)

    assert response.status_code == 400
    assert response.json() == {"status": "fail", "message": "Duplicate field value. Please use another value!"}
