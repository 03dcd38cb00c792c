from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from database import get_db
from services import auth_tokens
from services.user_service import UserRecord
from web import main as web_main
from web.middleware import auth_context


@pytest.fixture()
def app_client(db_session, monkeypatch):
    known = {}

    def fake_fetch(user_id: str):
        return known.get(user_id)

    monkeypatch.setattr(auth_context, "fetch_user_by_id", fake_fetch)

    def override_get_db():
        yield db_session

    web_main.app.dependency_overrides[get_db] = override_get_db
    client = TestClient(web_main.app)
    try:
        yield client, known
    finally:
        client.close()
        web_main.app.dependency_overrides.pop(get_db, None)


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_valid_token_reaches_protected_route(app_client, make_user) -> None:
    client, known = app_client
    user = make_user()
    known[user.id] = UserRecord(id=user.id, email=user.email, name=None, email_verified=True)
    token, ttl = auth_tokens.create_access_token(user_id=user.id, email=user.email, email_verified=True)

    response = client.get("/api/v1/shareable-links", headers=_bearer(token))

    assert ttl > 0
    assert response.status_code == 200
    assert response.json() == []


def test_missing_token_is_anonymous(app_client) -> None:
    client, _ = app_client

    protected = client.get("/api/v1/shareable-links")
    public = client.get("/api/v1/share/not-a-uuid")

    assert protected.status_code == 401
    assert protected.json()["detail"]["code"] == "auth.required"
    assert public.status_code == 404


def test_garbage_token_is_rejected(app_client) -> None:
    client, _ = app_client

    response = client.get("/api/v1/share/not-a-uuid", headers=_bearer("not-a-jwt"))

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "auth.token_invalid"


def test_expired_token_is_rejected(app_client) -> None:
    client, _ = app_client
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {
            "sub": "user_1",
            "aud": "vidshare-web",
            "iss": "vidshare-auth",
            "scope": "access",
            "iat": int((past - timedelta(minutes=15)).timestamp()),
            "exp": int(past.timestamp()),
        },
        "unit-test-secret",
        algorithm="HS256",
    )

    response = client.get("/api/v1/shareable-links", headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "auth.token_expired"


def test_token_for_unknown_user_is_rejected(app_client) -> None:
    client, _ = app_client
    token, _ = auth_tokens.create_access_token(user_id="user_gone", email="gone@x.com", email_verified=True)

    response = client.get("/api/v1/shareable-links", headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "auth.user_not_found"


def test_health_routes_skip_token_checks(app_client, monkeypatch) -> None:
    client, _ = app_client
    monkeypatch.setattr(web_main.routers.health, "ping_database", lambda: (True, None))
    monkeypatch.setattr(web_main.routers.health.invitation_queue, "ping", lambda: True)
    monkeypatch.setattr(web_main.routers.health.storage_service, "is_enabled", lambda: False)

    response = client.get("/api/v1/health/status", headers=_bearer("not-a-jwt"))

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "database": {"ok": True},
        "queue": {"ok": True},
        "storage": {"configured": False},
    }


def test_healthz_reports_database_outage(app_client, monkeypatch) -> None:
    client, _ = app_client
    monkeypatch.setattr(web_main.routers.health, "ping_database", lambda: (False, "connection refused"))

    response = client.get("/healthz")

    assert response.status_code == 503
    assert response.json()["database"] == {"ok": False, "error": "connection refused"}


def test_metrics_endpoint_exposes_share_counters(app_client) -> None:
    client, _ = app_client

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "share_link_resolutions_total" in response.text
