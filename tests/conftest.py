"""
Pytest configuration and shared fixtures for the chart & insight API tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

import config
from shared.schemas.python import AuthenticatedUser
from utils import blob_store, supabase_auth, supabase_client
from utils.errors import Unauthenticated, UpstreamFailure

SUPABASE_URL = "https://project.supabase.co"
ADMIN_TOKEN = "admin-token"
MEMBER_TOKEN = "member-token"
NO_PROFILE_TOKEN = "no-profile-token"


class FakeSupabase:
    """In-memory stand-in for Supabase Auth, PostgREST and Storage."""

    def __init__(self):
        self.users: Dict[str, AuthenticatedUser] = {}
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.charts: List[Dict[str, Any]] = []
        self.insights: List[Dict[str, Any]] = []
        self.blobs: Dict[str, Dict[str, Any]] = {}
        self.fail_profile = False
        self.fail_chart_insert = False
        self.fail_blob_upload = False
        self.fail_insight_insert = False
        self.fail_insight_list = False
        self.insight_queries: List[Dict[str, Any]] = []
        self._clock = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        self._next_id = 1

    def _stamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _id(self) -> str:
        value = f"row-{self._next_id}"
        self._next_id += 1
        return value

    def add_user(self, token: str, user_id: str, role: Optional[str] = None, email: Optional[str] = None):
        self.users[token] = AuthenticatedUser(id=user_id, email=email, role="authenticated")
        if role is not None:
            self.profiles[user_id] = {"id": user_id, "role": role}

    async def resolve_user(self, token: str) -> AuthenticatedUser:
        if token not in self.users:
            raise Unauthenticated()
        return self.users[token]

    async def fetch_profile(self, user_id: str, token: str) -> Optional[Dict[str, Any]]:
        if self.fail_profile:
            raise UpstreamFailure("Failed to load user profile", details="boom")
        return self.profiles.get(user_id)

    async def upload_chart_image(self, key, content, *, content_type, original_name, token) -> str:
        if self.fail_blob_upload:
            raise UpstreamFailure("Failed to store chart image", details="bucket not found")
        self.blobs[key] = {
            "content": content,
            "content_type": content_type,
            "original_name": original_name,
        }
        return blob_store.public_url(key)

    async def insert_chart(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        if self.fail_chart_insert:
            raise UpstreamFailure("new row violates row-level security policy", details="{}")
        row = {"id": self._id(), "created_at": self._stamp(), **payload}
        self.charts.append(row)
        return row

    async def list_charts(self, token: str, limit: int) -> List[Dict[str, Any]]:
        rows = sorted(self.charts, key=lambda r: r["created_at"], reverse=True)
        return rows[:limit]

    async def insert_trade_insight(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self.fail_insight_insert:
            raise UpstreamFailure(
                "Failed to store trade insight",
                details='{"message":"permission denied for table trade_insights"}',
            )
        row = {"id": self._id(), "created_at": self._stamp(), **payload}
        self.insights.append(row)
        return row

    async def list_trade_insights(self, token: str, limit: int) -> List[Dict[str, Any]]:
        self.insight_queries.append({"token": token, "limit": limit})
        if self.fail_insight_list:
            raise UpstreamFailure("Failed to fetch trade insights", details="JWT expired")
        rows = sorted(self.insights, key=lambda r: r["created_at"], reverse=True)
        return rows[:limit]


@pytest.fixture(autouse=True)
def supabase_config(monkeypatch):
    """Point every module at a fake project with a known anon key."""
    monkeypatch.setattr(config, "SUPABASE_URL", SUPABASE_URL)
    monkeypatch.setattr(config, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(config, "CHARTS_BUCKET", "charts")
    monkeypatch.setattr(config, "INSIGHT_INGEST_API_KEY", None)
    monkeypatch.setattr(config, "INSIGHTS_DEFAULT_LIMIT", 10)
    monkeypatch.setattr(config, "INSIGHTS_MAX_LIMIT", 100)


@pytest.fixture
def fake_supabase(monkeypatch):
    """Fixture providing a FakeSupabase wired into auth, REST and storage calls."""
    fake = FakeSupabase()
    fake.add_user(ADMIN_TOKEN, "admin-1", role="admin", email="admin@example.com")
    fake.add_user(MEMBER_TOKEN, "member-1", role="member", email="member@example.com")
    fake.add_user(NO_PROFILE_TOKEN, "ghost-1", role=None)

    monkeypatch.setattr(supabase_auth, "resolve_user", fake.resolve_user)
    monkeypatch.setattr(supabase_client, "fetch_profile", fake.fetch_profile)
    monkeypatch.setattr(supabase_client, "insert_chart", fake.insert_chart)
    monkeypatch.setattr(supabase_client, "list_charts", fake.list_charts)
    monkeypatch.setattr(supabase_client, "insert_trade_insight", fake.insert_trade_insight)
    monkeypatch.setattr(supabase_client, "list_trade_insights", fake.list_trade_insights)
    monkeypatch.setattr(blob_store, "upload_chart_image", fake.upload_chart_image)
    return fake


@pytest.fixture
def client(fake_supabase):
    """Fixture providing a TestClient for the API backed by FakeSupabase."""
    from api import app

    with TestClient(app) as test_client:
        yield test_client


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
