from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from database import get_db
from services import storage_service
from web.middleware.auth_context import AuthenticatedUser
from web.routers import account as account_router
from web.routers import videos as videos_router


class _FakeMinio:
    def __init__(self) -> None:
        self.buckets = set()
        self.presigned = []

    def bucket_exists(self, bucket_name: str) -> bool:
        return bucket_name in self.buckets

    def make_bucket(self, bucket_name: str) -> None:
        self.buckets.add(bucket_name)

    def presigned_put_object(self, bucket_name: str, object_name: str, expires: timedelta = timedelta(hours=1)) -> str:
        self.presigned.append((bucket_name, object_name, expires))
        return f"https://minio.local/{bucket_name}/{object_name}?X-Amz-Signature=abc"


@pytest.fixture()
def api(db_session):
    signed_in = {"user": None}
    app = FastAPI()
    app.include_router(videos_router.router, prefix="/api/v1")
    app.include_router(account_router.router, prefix="/api/v1")

    @app.middleware("http")
    async def _fake_auth(request: Request, call_next):
        request.state.user = signed_in["user"]
        return await call_next(request)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    try:
        yield client, signed_in
    finally:
        client.close()


def _sign_in(signed_in, user) -> None:
    signed_in["user"] = AuthenticatedUser(id=user.id, email=user.email, name=user.name, email_verified=True)


def test_save_then_list_videos(api, make_user) -> None:
    client, signed_in = api
    _sign_in(signed_in, make_user())

    first = client.post("/api/v1/videos/save", json={"url": "https://cdn.example.com/a.mp4", "size": 10})
    second = client.post(
        "/api/v1/videos/save",
        json={"name": "b.mp4", "url": "https://cdn.example.com/b.mp4", "thumbnailUrl": "https://cdn.example.com/b.jpg"},
    )
    listed = client.get("/api/v1/videos")

    assert first.status_code == 200
    assert first.json()["fileName"] == "Untitled Video"
    assert first.json()["fileSize"] == 10
    assert second.json()["thumbnailUrl"] == "https://cdn.example.com/b.jpg"
    assert [item["fileName"] for item in listed.json()] == ["b.mp4", "Untitled Video"]


def test_videos_are_scoped_to_owner(api, make_user, make_video) -> None:
    client, signed_in = api
    other = make_user()
    make_video(other.id)
    _sign_in(signed_in, make_user())

    response = client.get("/api/v1/videos")

    assert response.status_code == 200
    assert response.json() == []


def test_save_without_url_is_400(api, make_user) -> None:
    client, signed_in = api
    _sign_in(signed_in, make_user())

    response = client.post("/api/v1/videos/save", json={"name": "orphan.mp4"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "videos.url_required"


def test_video_routes_require_sign_in(api) -> None:
    client, _ = api

    assert client.get("/api/v1/videos").status_code == 401
    assert client.post("/api/v1/videos/save", json={"url": "https://x"}).status_code == 401
    assert client.get("/api/v1/upload-auth").status_code == 401


def test_upload_auth_issues_presigned_put(api, make_user, monkeypatch) -> None:
    client, signed_in = api
    user = make_user()
    _sign_in(signed_in, user)
    fake = _FakeMinio()
    monkeypatch.setattr(storage_service, "_client", fake)
    monkeypatch.setattr(storage_service, "MEDIA_CDN_BASE_URL", "https://media.example.com/")

    response = client.get("/api/v1/upload-auth", params={"fileName": "Clip.MOV"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["objectName"].startswith(f"videos/{user.id}/")
    assert payload["objectName"].endswith(".mov")
    assert payload["fileUrl"] == f"https://media.example.com/{payload['objectName']}"
    assert payload["uploadUrl"].startswith("https://minio.local/")
    assert fake.buckets == {storage_service.MINIO_BUCKET}
    assert fake.presigned[0][2] == timedelta(seconds=storage_service.UPLOAD_URL_TTL_SECONDS)


def test_upload_auth_without_storage_is_503(api, make_user, monkeypatch) -> None:
    client, signed_in = api
    _sign_in(signed_in, make_user())
    monkeypatch.setattr(storage_service, "_client", None)
    monkeypatch.setattr(storage_service, "MINIO_ENDPOINT", None)

    response = client.get("/api/v1/upload-auth")

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "storage.unavailable"


def test_check_email(api, make_user) -> None:
    client, signed_in = api
    existing = make_user("friend@x.com")
    _sign_in(signed_in, make_user())

    found = client.post("/api/v1/check-email", json={"email": existing.email})
    missing = client.post("/api/v1/check-email", json={"email": "nobody@x.com"})
    other_case = client.post("/api/v1/check-email", json={"email": "Friend@x.com"})

    assert found.json() == {"exists": True}
    assert missing.json() == {"exists": False}
    assert other_case.json() == {"exists": False}


def test_check_email_requires_email_and_sign_in(api, make_user) -> None:
    client, signed_in = api

    anonymous = client.post("/api/v1/check-email", json={"email": "a@x.com"})
    _sign_in(signed_in, make_user())
    blank = client.post("/api/v1/check-email", json={})

    assert anonymous.status_code == 401
    assert blank.status_code == 400
    assert blank.json()["detail"]["code"] == "account.email_required"
