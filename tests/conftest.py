import json
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest

os.environ.setdefault("DATABASE_ALLOW_NON_POSTGRES", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", os.getenv("DATABASE_URL", os.environ["TEST_DATABASE_URL"]))
os.environ.setdefault("AUTH_JWT_SECRET", "unit-test-secret")

from sqlalchemy import create_engine, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.engine import Engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

import database as database_module
from database import Base, IS_POSTGRES

# Provide lightweight fallbacks for PostgreSQL-only column types when using SQLite.
if not IS_POSTGRES:
    @compiles(UUID, "sqlite")  # type: ignore[misc]
    def _compile_uuid_sqlite(_element, _compiler, **_kw):  # pragma: no cover - sqlite compat
        return "CHAR(32)"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "postgres: requires a PostgreSQL database")


def _resolve_test_database_url() -> str:
    return os.getenv("TEST_DATABASE_URL") or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine(request: pytest.FixtureRequest) -> Generator[Engine, None, None]:
    import models  # noqa: F401  # registers every table on Base.metadata

    database_url = _resolve_test_database_url()
    engine_kwargs: Dict[str, Any] = {}
    connect_args: Dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" in database_url:
            engine_kwargs["poolclass"] = StaticPool
    test_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    if database_url.startswith("sqlite"):
        # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; emit it explicitly.
        @event.listens_for(test_engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection, _record):  # pragma: no cover - sqlite compat
            dbapi_connection.isolation_level = None

        @event.listens_for(test_engine, "begin")
        def _emit_begin(conn):  # pragma: no cover - sqlite compat
            conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=test_engine)

    SessionFactory = scoped_session(sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False))
    original_session_local = database_module.SessionLocal
    original_engine = database_module.engine
    database_module.SessionLocal = SessionFactory
    database_module.engine = test_engine
    try:
        yield test_engine
    finally:
        database_module.SessionLocal = original_session_local
        database_module.engine = original_engine
        Base.metadata.drop_all(bind=test_engine)
        SessionFactory.remove()
        test_engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Session whose commits become savepoints inside a rolled-back transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


class FakeRedis:
    """In-memory stand-in for the handful of redis commands the queue uses."""

    def __init__(self, *, fail_with: Optional[Exception] = None) -> None:
        self.lists: Dict[str, List[str]] = {}
        self.fail_with = fail_with

    def lpush(self, key: str, *values: str) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        bucket = self.lists.setdefault(key, [])
        for value in values:
            bucket.insert(0, value)
        return len(bucket)

    def rpop(self, key: str) -> Optional[str]:
        bucket = self.lists.get(key) or []
        return bucket.pop() if bucket else None

    def ping(self) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        return True

    def jobs(self, key: str) -> List[Dict[str, Any]]:
        return [json.loads(raw) for raw in self.lists.get(key, [])]


@pytest.fixture()
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    from services import invitation_queue

    client = FakeRedis()
    monkeypatch.setattr(invitation_queue, "_CLIENT", client)
    return client


@pytest.fixture()
def make_user(db_session: Session):
    from models.user import User

    def _make(email: Optional[str] = None, *, verified: bool = True, name: Optional[str] = None) -> User:
        user = User(
            id=f"user_{uuid.uuid4().hex[:12]}",
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            name=name,
            email_verified_at=datetime.now(timezone.utc) if verified else None,
        )
        db_session.add(user)
        db_session.flush()
        return user

    return _make


@pytest.fixture()
def make_video(db_session: Session):
    from models.video import Video

    def _make(owner_id: str, *, file_name: str = "holiday.mp4", thumbnail_url: Optional[str] = None) -> Video:
        video = Video(
            user_id=owner_id,
            file_name=file_name,
            file_url=f"https://cdn.example.com/videos/{uuid.uuid4().hex}.mp4",
            file_size=1024,
            thumbnail_url=thumbnail_url,
        )
        db_session.add(video)
        db_session.flush()
        return video

    return _make
