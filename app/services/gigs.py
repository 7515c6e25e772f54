"""
Gig service layer: creation, lookup, and listing.

Gigs are created open and only ever leave that state through the hire
transaction in ``app.services.hiring``.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from typing import Optional, Sequence

import structlog
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFound, parse_input
from app.models.gig import Gig
from app.models.user import User
from app.services import store
from gigflow_shared.schemas.common import GigStatus, UserSummary
from gigflow_shared.schemas.gigs import GigCreate, GigRead

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_gig_or_404(session: AsyncSession, gig_id: uuid.UUID) -> Gig:
    gig = await store.read(session, Gig, gig_id)
    if not gig:
        raise NotFound("Gig not found")
    return gig


async def user_summaries(
    session: AsyncSession, user_ids: set[uuid.UUID]
) -> dict[uuid.UUID, UserSummary]:
    if not user_ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(user_ids)))
    return {
        u.id: UserSummary(id=u.id, name=u.name, email=u.email)
        for u in result.scalars().all()
    }


def to_read(gig: Gig, owner: Optional[UserSummary] = None) -> GigRead:
    return GigRead(
        id=gig.id,
        title=gig.title,
        description=gig.description,
        budget=gig.budget,
        owner_id=gig.owner_id,
        owner=owner,
        status=gig.status,
        created_at=gig.created_at,
        updated_at=gig.updated_at,
    )


async def enrich_gigs(session: AsyncSession, gigs: Sequence[Gig]) -> list[GigRead]:
    """Convert gigs to GigRead with the owner summary in one extra query."""
    owners = await user_summaries(session, {g.owner_id for g in gigs})
    return [to_read(g, owners.get(g.owner_id)) for g in gigs]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_gig(
    session: AsyncSession,
    owner_id: uuid.UUID,
    title: str,
    description: str,
    budget: float,
) -> Gig:
    gig_in = parse_input(GigCreate, title=title, description=description, budget=budget)
    try:
        gig = await store.create(
            session,
            Gig(
                title=gig_in.title,
                description=gig_in.description,
                budget=gig_in.budget,
                owner_id=owner_id,
                status=GigStatus.OPEN.value,
            ),
        )
    except IntegrityError as exc:
        await session.rollback()
        if store.violates(exc, *store.FOREIGN_KEY_MARKERS):
            log.warning("gig.unknown_owner", owner_id=str(owner_id))
            raise NotFound("User not found") from exc
        raise

    log.info("gig.created", gig_id=str(gig.id), owner_id=str(owner_id))
    return gig


async def get_gig(session: AsyncSession, gig_id: uuid.UUID) -> Gig:
    return await get_gig_or_404(session, gig_id)


class GigListing:
    """Newest-first gig query that runs when iterated.

    Each ``async for`` re-executes the query, so a listing can be iterated
    again to pick up gigs created in the meantime.
    """

    def __init__(
        self,
        session: AsyncSession,
        text: Optional[str] = None,
        status: Optional[GigStatus] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ):
        self._session = session
        stmt = select(Gig)
        if text and text.strip():
            pattern = f"%{_escape_like(text.strip())}%"
            stmt = stmt.where(
                or_(
                    Gig.title.ilike(pattern, escape="\\"),
                    Gig.description.ilike(pattern, escape="\\"),
                )
            )
        if status:
            stmt = stmt.where(Gig.status == GigStatus(status).value)
        stmt = stmt.order_by(Gig.created_at.desc(), Gig.id)
        if per_page:
            stmt = stmt.offset(((page or 1) - 1) * per_page).limit(per_page)
        self.statement = stmt

    async def __aiter__(self) -> AsyncIterator[Gig]:
        result = await self._session.execute(self.statement)
        for gig in result.scalars().all():
            yield gig

    async def all(self) -> list[Gig]:
        return [gig async for gig in self]


def list_gigs(
    session: AsyncSession,
    text: Optional[str] = None,
    status: Optional[GigStatus] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> GigListing:
    """Gigs matching ``text`` (title or description substring) and ``status``."""
    return GigListing(session, text=text, status=status, page=page, per_page=per_page)
