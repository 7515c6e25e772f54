"""
Bid service layer: submission and owner-only listing.

Handles:
- Field validation and gig state/ownership checks before any write
- One bid per freelancer per gig, enforced by the unique constraint
- Enrichment of bid data for API responses
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import Conflict, Forbidden, InvalidState, NotFound, parse_input
from app.models.bid import Bid
from app.services import store
from app.services.gigs import get_gig_or_404, user_summaries
from gigflow_shared.schemas.bids import BidFields, BidRead
from gigflow_shared.schemas.common import BidStatus, GigStatus, UserSummary

log = structlog.get_logger()

_DUPLICATE_BID_MARKERS = (
    "uq_bids_gig_id_freelancer_id",
    "UNIQUE constraint failed: bids.gig_id, bids.freelancer_id",
)


def to_read(bid: Bid, freelancer: UserSummary | None = None) -> BidRead:
    return BidRead(
        id=bid.id,
        gig_id=bid.gig_id,
        freelancer_id=bid.freelancer_id,
        freelancer=freelancer,
        message=bid.message,
        price=bid.price,
        status=bid.status,
        created_at=bid.created_at,
        updated_at=bid.updated_at,
    )


async def enrich_bids(session: AsyncSession, bids: Sequence[Bid]) -> list[BidRead]:
    freelancers = await user_summaries(session, {b.freelancer_id for b in bids})
    return [to_read(b, freelancers.get(b.freelancer_id)) for b in bids]


async def create_bid(
    session: AsyncSession,
    gig_id: uuid.UUID,
    freelancer_id: uuid.UUID,
    message: str,
    price: float,
) -> Bid:
    fields = parse_input(BidFields, message=message, price=price)

    gig = await get_gig_or_404(session, gig_id)
    if gig.status != GigStatus.OPEN.value:
        raise InvalidState("This gig is no longer accepting bids")
    if gig.owner_id == freelancer_id:
        raise Forbidden("You cannot bid on your own gig")

    try:
        bid = await store.create(
            session,
            Bid(
                gig_id=gig_id,
                freelancer_id=freelancer_id,
                message=fields.message,
                price=fields.price,
                status=BidStatus.PENDING.value,
            ),
        )
    except IntegrityError as exc:
        await session.rollback()
        if store.violates(exc, *_DUPLICATE_BID_MARKERS):
            log.info("bid.duplicate", gig_id=str(gig_id), freelancer_id=str(freelancer_id))
            raise Conflict("You have already submitted a bid for this gig") from exc
        if store.violates(exc, *store.FOREIGN_KEY_MARKERS):
            log.warning("bid.unknown_freelancer", gig_id=str(gig_id), freelancer_id=str(freelancer_id))
            raise NotFound("User not found") from exc
        raise

    log.info("bid.created", bid_id=str(bid.id), gig_id=str(gig_id), freelancer_id=str(freelancer_id))
    return bid


async def list_bids_for_gig(
    session: AsyncSession,
    gig_id: uuid.UUID,
    requester_id: uuid.UUID,
) -> list[Bid]:
    gig = await get_gig_or_404(session, gig_id)
    if gig.owner_id != requester_id:
        raise Forbidden("Only the gig owner can view bids")

    result = await session.execute(
        select(Bid).where(Bid.gig_id == gig_id).order_by(Bid.created_at.desc(), Bid.id)
    )
    return list(result.scalars().all())
