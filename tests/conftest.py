"""
Shared fixtures.

Tests run against a throwaway SQLite file through aiosqlite so transactions,
the unique constraint and the conditional UPDATE behave like a real store
(including lock waits between concurrent sessions). The environment is set
before ``app`` is imported so the module-level engine points at that file.
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

_DB_DIR = tempfile.mkdtemp(prefix="gigflow-tests-")
os.environ.setdefault("GF_DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}")
os.environ.setdefault("GF_SECRET_KEY", "test-secret-key-0123456789-abcdefghijklmnopqrstuvwxyz")
os.environ.setdefault("GF_LOG_FORMAT", "text")

import asyncio

import jwt
import pytest
from sqlalchemy import event
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.config import get_settings
from app.core.database import async_session_factory, engine
from app.models.bid import Bid
from app.models.gig import Gig
from app.models.user import User


@pytest.fixture
async def db():
    """Fresh schema per test; the pool is disposed so no connection outlives its loop."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def enforce_foreign_keys(db):
    """SQLite leaves foreign keys unchecked unless each connection asks for them."""

    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await engine.dispose()
    event.listen(engine.sync_engine, "connect", _on_connect)
    yield
    event.remove(engine.sync_engine, "connect", _on_connect)


@pytest.fixture
async def session(db):
    async with async_session_factory() as s:
        yield s


@pytest.fixture
async def users(session):
    """An owner and three freelancers, keyed by role name."""
    people = {
        "owner": User(name="John Client", email="client@example.com"),
        "jane": User(name="Jane Freelancer", email="freelancer@example.com"),
        "bob": User(name="Bob Builder", email="bob@example.com"),
        "ada": User(name="Ada Coder", email="ada@example.com"),
    }
    session.add_all(people.values())
    await session.commit()
    return people


@pytest.fixture
async def open_gig(session, users):
    gig = Gig(
        title="Build a React E-commerce Site",
        description="Full-stack developer needed for a modern e-commerce platform.",
        budget=1500,
        owner_id=users["owner"].id,
    )
    session.add(gig)
    await session.commit()
    return gig


async def add_bid(session, gig: Gig, freelancer: User, price: float = 100, **kw) -> Bid:
    bid = Bid(
        gig_id=gig.id,
        freelancer_id=freelancer.id,
        message=kw.pop("message", "I can deliver this within two weeks."),
        price=price,
        **kw,
    )
    session.add(bid)
    await session.commit()
    return bid


async def reload(model, record_id):
    """Read a record through a brand-new session (what another request would see)."""
    async with async_session_factory() as s:
        return await s.get(model, record_id)


def make_token(user_id: uuid.UUID, *, expires_in: timedelta = timedelta(minutes=30)) -> str:
    settings = get_settings()
    payload = {
        "sub": str(user_id),
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


class RecordingNotifier:
    """HireNotifier test double that records calls and can be made to fail."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[uuid.UUID, uuid.UUID, str]] = []
        self.error = error
        self.called = asyncio.Event()

    async def notify_hired(self, freelancer_id, gig_id, gig_title):
        self.calls.append((freelancer_id, gig_id, gig_title))
        self.called.set()
        if self.error:
            raise self.error
        return 1
