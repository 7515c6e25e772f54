"""
Entity store primitives over an AsyncSession.

Every helper works inside whatever transaction the session already has open,
so callers compose several of them into one atomic unit and commit (or roll
back) once.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

ModelT = TypeVar("ModelT", bound=SQLModel)

# driver wording for a missing referenced row (postgres, sqlite)
FOREIGN_KEY_MARKERS = ("violates foreign key constraint", "FOREIGN KEY constraint failed")


def violates(exc: IntegrityError, *markers: str) -> bool:
    """True when the driver's error message mentions any of ``markers``.

    Postgres names the violated constraint; SQLite names its kind and columns.
    """
    detail = str(exc.orig)
    return any(marker in detail for marker in markers)


async def read(session: AsyncSession, model: type[ModelT], record_id: uuid.UUID) -> Optional[ModelT]:
    return await session.get(model, record_id)


async def create(session: AsyncSession, record: ModelT) -> ModelT:
    """Insert a record and flush so constraint violations raise here."""
    session.add(record)
    await session.flush()
    return record


async def conditional_update(
    session: AsyncSession,
    model: type[ModelT],
    record_id: uuid.UUID,
    expected: dict[str, Any],
    values: dict[str, Any],
) -> bool:
    """Compare-and-swap: apply ``values`` only if every ``expected`` field still matches.

    Returns True when the row matched. The guard is evaluated by the database at
    write time, so a concurrent writer that committed first makes this return False.
    """
    stmt = update(model).where(model.id == record_id)
    for field, value in expected.items():
        stmt = stmt.where(getattr(model, field) == value)
    result = await session.execute(
        stmt.values(**values).execution_options(synchronize_session="evaluate")
    )
    return result.rowcount == 1


async def update_many(
    session: AsyncSession,
    model: type[ModelT],
    criteria: list[Any],
    values: dict[str, Any],
) -> int:
    """Apply ``values`` to every row matching ``criteria``. Returns the row count."""
    result = await session.execute(
        update(model)
        .where(*criteria)
        .values(**values)
        .execution_options(synchronize_session="evaluate")
    )
    return result.rowcount
