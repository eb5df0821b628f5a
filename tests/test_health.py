"""Tests for the health endpoint and the profile endpoint."""

from conftest import ADMIN_TOKEN, MEMBER_TOKEN, NO_PROFILE_TOKEN, bearer
from version import __version__


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["version"] == __version__
    assert body["uptime_seconds"] >= 0


def test_profile_requires_auth(client):
    assert client.get("/api/profile").status_code == 401


def test_profile_reports_admin(client):
    body = client.get("/api/profile", headers=bearer(ADMIN_TOKEN)).json()
    assert body["is_admin"] is True
    assert body["profile"] == {"id": "admin-1", "role": "admin"}
    assert body["user"]["id"] == "admin-1"


def test_profile_for_member_and_missing_profile(client):
    member = client.get("/api/profile", headers=bearer(MEMBER_TOKEN)).json()
    assert member["is_admin"] is False

    ghost = client.get("/api/profile", headers=bearer(NO_PROFILE_TOKEN)).json()
    assert ghost["is_admin"] is False
    assert ghost["profile"] is None


def test_unexpected_error_is_500_with_message(fake_supabase, monkeypatch):
    from fastapi.testclient import TestClient

    from api import app
    from utils import supabase_client

    async def broken_list(token, limit):
        raise RuntimeError("connection pool exhausted")

    monkeypatch.setattr(supabase_client, "list_charts", broken_list)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get("/api/charts", headers=bearer(MEMBER_TOKEN))

    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal server error",
        "message": "connection pool exhausted",
    }
