import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from dotenv import load_dotenv

load_dotenv()

TEST_DATABASE_URL: Optional[str] = os.getenv("TEST_DATABASE_URL")
DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or TEST_DATABASE_URL
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL or TEST_DATABASE_URL must be set.")

ALLOW_NON_POSTGRES = os.getenv("DATABASE_ALLOW_NON_POSTGRES", "0") == "1"
IS_POSTGRES = DATABASE_URL.lower().startswith("postgresql")
if not IS_POSTGRES and not ALLOW_NON_POSTGRES:
    raise RuntimeError(f"DATABASE_URL must be a PostgreSQL DSN. Got: {DATABASE_URL}")


def _engine_options() -> Dict[str, Any]:
    if not IS_POSTGRES:
        connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
        return {"connect_args": connect_args}
    return {
        "pool_pre_ping": True,
        "pool_size": int(os.getenv("DATABASE_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DATABASE_MAX_OVERFLOW", "10")),
        "pool_recycle": int(os.getenv("DATABASE_POOL_RECYCLE_SECONDS", "1800")),
    }


engine = create_engine(DATABASE_URL, **_engine_options())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base shared by the users, videos and share_links tables."""


def get_db():
    """Yield a request-scoped session for FastAPI dependencies."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Short-lived session for work outside a request (auth lookups, probes)."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
