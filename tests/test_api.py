"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from radar_service.api.app import create_app
from radar_service.containers import AppContainer
from radar_service.services.users import UserService
from tests.conftest import BERLIN, HAMBURG, MUNICH
from tests.test_user_service import UnreachableUserRepository


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def _create_user(client: TestClient, email: str) -> int:
    response = client.post("/api/v1/users", json={"email": email})
    assert response.status_code == 201
    return response.json()["id"]


def _report(client: TestClient, user_id: int, point: tuple[float, float], **extra):
    return client.post(
        "/api/v1/radar/location",
        json={"user_id": user_id, "latitude": point[0], "longitude": point[1], **extra},
    )


def test_health_ok(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_health_reports_database_failure(container: AppContainer) -> None:
    container.user_service = UserService(UnreachableUserRepository())
    client = TestClient(create_app(container))

    response = client.get("/api/v1/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_user_crud(client: TestClient) -> None:
    user_id = _create_user(client, "crud@example.com")

    assert client.get(f"/api/v1/users/{user_id}").json()["email"] == "crud@example.com"
    assert [user["id"] for user in client.get("/api/v1/users").json()] == [user_id]

    deleted = client.delete(f"/api/v1/users/{user_id}")
    assert deleted.json() == {"message": "user deleted successfully"}
    assert client.get(f"/api/v1/users/{user_id}").status_code == 404
    assert client.delete(f"/api/v1/users/{user_id}").status_code == 404


def test_create_user_validates_email(client: TestClient) -> None:
    response = client.post("/api/v1/users", json={"email": "not-an-email"})

    assert response.status_code == 400
    assert "email" in response.json()["error"]


def test_create_user_duplicate_conflicts(client: TestClient) -> None:
    _create_user(client, "twice@example.com")

    response = client.post("/api/v1/users", json={"email": "twice@example.com"})

    assert response.status_code == 409


def test_update_location_returns_record(client: TestClient) -> None:
    user_id = _create_user(client, "loc@example.com")

    response = _report(client, user_id, BERLIN)

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == user_id
    assert data["latitude"] == pytest.approx(52.52)
    assert data["longitude"] == pytest.approx(13.405)
    assert data["is_active"] is True
    assert "updated_at" in data


def test_update_location_replaces_existing(
    client: TestClient, location_repository
) -> None:
    user_id = _create_user(client, "update@example.com")
    _report(client, user_id, (40.7128, -74.0060))

    response = _report(client, user_id, BERLIN)

    assert response.status_code == 200
    assert response.json()["latitude"] == pytest.approx(52.52)
    assert len(location_repository.records) == 1


def test_update_location_can_set_inactive(client: TestClient) -> None:
    user_id = _create_user(client, "inactive@example.com")

    response = _report(client, user_id, (48.8566, 2.3522), is_active=False)

    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_update_location_unknown_user(client: TestClient) -> None:
    response = _report(client, 99999, (48.8566, 2.3522))

    assert response.status_code == 404
    assert response.json() == {"error": "user not found"}


@pytest.mark.parametrize(
    "point", [(91.0, 0.0), (-91.0, 0.0), (0.0, 181.0), (0.0, -181.0)]
)
def test_update_location_invalid_coordinates(client: TestClient, point) -> None:
    user_id = _create_user(client, "invalid@example.com")

    response = _report(client, user_id, point)

    assert response.status_code == 400


def test_update_location_missing_field(client: TestClient) -> None:
    response = client.post("/api/v1/radar/location", json={"latitude": 1.0})

    assert response.status_code == 400


def test_nearby_users(client: TestClient) -> None:
    berlin = _create_user(client, "berlin@example.com")
    munich = _create_user(client, "munich@example.com")
    hamburg = _create_user(client, "hamburg@example.com")
    for user_id, point in ((berlin, BERLIN), (munich, MUNICH), (hamburg, HAMBURG)):
        assert _report(client, user_id, point).status_code == 200

    response = client.get(
        "/api/v1/radar/nearby",
        params={"latitude": 52.52, "longitude": 13.405, "radius": 300},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [user["user_id"] for user in data["users"]] == [berlin, hamburg]
    assert data["users"][1]["email"] == "hamburg@example.com"
    assert data["users"][1]["distance_km"] == pytest.approx(255, abs=3)
    assert "last_update_at" in data["users"][0]


def test_nearby_excludes_inactive(client: TestClient) -> None:
    active = _create_user(client, "active@example.com")
    inactive = _create_user(client, "inactive@example.com")
    _report(client, active, BERLIN)
    _report(client, inactive, (52.5210, 13.4100), is_active=False)

    response = client.get(
        "/api/v1/radar/nearby",
        params={"latitude": 52.52, "longitude": 13.405, "radius": 10},
    )

    assert response.json()["count"] == 1


def test_nearby_no_users_in_radius(client: TestClient) -> None:
    user_id = _create_user(client, "faraway@example.com")
    _report(client, user_id, (37.7749, -122.4194))

    response = client.get(
        "/api/v1/radar/nearby",
        params={"latitude": 52.52, "longitude": 13.405, "radius": 10},
    )

    assert response.json() == {"count": 0, "users": []}


@pytest.mark.parametrize(
    "params",
    [
        {"latitude": 52.52, "longitude": 13.405, "radius": -10},
        {"latitude": 91, "longitude": 13.405, "radius": 10},
        {"latitude": 52.52, "longitude": 181, "radius": 10},
        {"latitude": 52.52, "longitude": 13.405},
        {"latitude": "north", "longitude": 13.405, "radius": 10},
    ],
)
def test_nearby_invalid_parameters(client: TestClient, params) -> None:
    response = client.get("/api/v1/radar/nearby", params=params)

    assert response.status_code == 400
    assert "error" in response.json()
