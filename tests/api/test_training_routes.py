import pytest
from fastapi.testclient import TestClient

from stairup.main import create_app
from stairup.services.token_store import InMemoryTokenStore
from stairup.utils.cooldown import LapCooldown
from tests.conftest import FakeGateway

API = "/api/v1"


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return InMemoryTokenStore()


@pytest.fixture
def client(fake_gateway, store):
    app = create_app(gateway=fake_gateway, token_store=store, cooldown=LapCooldown(0))
    with TestClient(app) as test_client:
        yield test_client


def login(client):
    response = client.post(f"{API}/auth/login", json={"email": "alice", "password": "secret"})
    assert response.status_code == 200
    return response.json()


def start_session(client, floors_per_lap=2, target_floors=20):
    response = client.post(
        f"{API}/training/sessions",
        json={"floors_per_lap": floors_per_lap, "target_floors": target_floors}
    )
    assert response.status_code == 200
    return response.json()["session"]


def test_protected_routes_require_login(client):
    response = client.get(f"{API}/training")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated, please log in"}


def test_login_failure_is_401(client, store):
    response = client.post(f"{API}/auth/login", json={"email": "alice", "password": "wrong"})

    assert response.status_code == 401
    assert store.get() is None


def test_login_stores_token_and_logout_clears_it(client, store):
    body = login(client)
    assert body["user"]["username"] == "alice"
    assert body["redirect_to"] == "/"
    assert store.is_authenticated()

    response = client.post(f"{API}/auth/logout")
    assert response.json()["redirect_to"] == "/login"
    assert store.get() is None


def test_register_logs_the_new_user_in(client, store):
    response = client.post(
        f"{API}/auth/register",
        json={"username": "carol", "email": "carol@example.com", "password": "secret1"}
    )

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "carol"
    assert client.get(f"{API}/me").json()["username"] == "carol"


def test_training_page_without_session_offers_suggestions(client):
    login(client)

    body = client.get(f"{API}/training").json()

    assert body["session"] is None
    assert body["can_operate"] is False
    assert body["suggestions"] == {"floors_per_lap": [], "target_floors": []}


def test_full_training_flow(client, fake_gateway):
    login(client)
    session = start_session(client)
    assert session["status"] == "active"

    fake_gateway.advance(40)
    lap_body = client.post(f"{API}/training/laps", json={"session_id": session["id"]}).json()
    assert lap_body["lap"]["lap_number"] == 1
    assert lap_body["lap"]["lap_time_seconds"] == 40
    assert lap_body["statistics"]["total_floors_climbed"] == 2
    assert lap_body["statistics"]["completion_rate"] == 10

    fake_gateway.advance(50)
    finish_body = client.post(f"{API}/training/finish", json={"session_id": session["id"]}).json()
    assert finish_body["session"]["status"] == "finished"
    assert finish_body["can_operate"] is False
    assert finish_body["redirect_to"] == f"/history/{session['id']}"

    history = client.get(f"{API}/history").json()
    assert history["count"] == 1
    assert history["sessions"][0]["duration_display"] == "01:30"

    detail = client.get(f"{API}/history/{session['id']}").json()
    assert detail["statistics"]["total_time_seconds"] == 90
    assert detail["laps"][0]["formatted_lap_time"] == "00:40"
    assert detail["formatted_statistics"]["total_time"] == "01:30"


def test_starting_twice_returns_the_active_session(client):
    login(client)
    first = start_session(client, 2, 20)
    second = start_session(client, 4, 40)

    assert second["id"] == first["id"]
    assert second["floors_per_lap"] == 2


def test_home_redirects_to_active_training(client):
    login(client)
    home = client.get(f"{API}/home").json()
    assert home["redirect_to"] is None
    assert home["stats"]["total_sessions"] == 0

    session = start_session(client)
    home = client.get(f"{API}/home").json()
    assert home["redirect_to"] == "/training"
    assert home["active_session_id"] == session["id"]


def test_cancel_requires_confirmation(client):
    login(client)
    session = start_session(client)

    response = client.post(f"{API}/training/cancel", json={"session_id": session["id"]})
    assert response.status_code == 422
    assert "confirmation" in response.json()["error"]

    response = client.post(f"{API}/training/cancel", json={"session_id": session["id"], "confirm": True})
    assert response.status_code == 200
    assert response.json()["session"]["status"] == "abandoned"

    assert client.get(f"{API}/history").json()["count"] == 0


def test_lap_on_closed_session_is_409(client):
    login(client)
    session = start_session(client)
    client.post(f"{API}/training/finish", json={"session_id": session["id"]})

    response = client.post(f"{API}/training/laps", json={"session_id": session["id"]})

    assert response.status_code == 409


def test_invalid_session_parameters_are_422(client, fake_gateway):
    login(client)

    response = client.post(f"{API}/training/sessions", json={"floors_per_lap": 0, "target_floors": 20})

    assert response.status_code == 422
    assert "create_session" not in fake_gateway.calls


def test_unknown_session_is_404_with_message(client):
    login(client)

    response = client.get(f"{API}/history/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "Session missing not found"}


def test_unknown_route_is_json_404(client):
    login(client)

    response = client.get(f"{API}/nowhere")

    assert response.status_code == 404
    assert response.json()["error"] == "Route not found"


def test_rejected_token_logs_the_user_out(client, fake_gateway, store):
    login(client)
    fake_gateway.revoke(store.get())

    response = client.get(f"{API}/me")

    assert response.status_code == 401
    assert store.get() is None
    assert client.get(f"{API}/training").status_code == 401


def test_profile_update_sets_display_name(client):
    login(client)

    response = client.put(f"{API}/me", json={"nickname": "Al", "phone": "555-0100"})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Al"
    assert response.json()["user"]["metadata"] == {"nickname": "Al", "phone": "555-0100"}


def test_rankings_validate_query(client):
    login(client)

    assert client.get(f"{API}/rankings", params={"limit": 0}).status_code == 422
    body = client.get(f"{API}/rankings", params={"by": "total_sessions"}).json()
    assert body["by"] == "total_sessions"
    assert body["rankings"][0]["username"] == "alice"


def test_lap_cooldown_returns_429(fake_gateway, store):
    app = create_app(gateway=fake_gateway, token_store=store, cooldown=LapCooldown(60))
    with TestClient(app) as client:
        login(client)
        session = start_session(client)

        assert client.post(f"{API}/training/laps", json={"session_id": session["id"]}).status_code == 200
        response = client.post(f"{API}/training/laps", json={"session_id": session["id"]})

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0
    assert response.json()["retry_after"] > 0
    assert len(fake_gateway.laps[session["id"]]) == 1
