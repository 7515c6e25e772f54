"""
Database connection and session management.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import get_settings

settings = get_settings()


def _connect_args(database_url: str, timeout: float) -> dict:
    """Driver-level timeouts so a stalled store surfaces as an error instead of a hang."""
    backend = make_url(database_url).get_backend_name()
    if backend == "postgresql":
        return {"timeout": timeout, "command_timeout": timeout}
    if backend == "sqlite":
        # busy timeout: how long a writer waits for another writer's lock
        return {"timeout": timeout}
    return {}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    connect_args=_connect_args(settings.database_url, settings.database_timeout_seconds),
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db():
    """Create all tables (development only; use migrations in production)."""
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_session_context():
    """Context manager for use outside of FastAPI request lifecycle."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
