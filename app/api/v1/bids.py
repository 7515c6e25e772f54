"""
Bid endpoints: submit, list for a gig, hire.

- One bid per freelancer per gig; owners cannot bid on their own gig.
- Only the gig owner sees a gig's bids and can hire.
- Hiring is transactional: the gig becomes assigned, the chosen bid hired and
  every other pending bid rejected, all or nothing. The hired freelancer gets a
  live notification after the commit.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.notifications import get_notification_hub
from app.core.auth import get_current_user_id
from app.core.database import async_session_factory, get_session
from app.core.notifications import NotificationHub
from app.services.bids import create_bid, enrich_bids, list_bids_for_gig, to_read
from app.services.hiring import HireCoordinator
from gigflow_shared.schemas.bids import BidCreate, BidRead, HireResponse

router = APIRouter()


def get_hire_coordinator(
    hub: NotificationHub = Depends(get_notification_hub),
) -> HireCoordinator:
    return HireCoordinator(async_session_factory, hub)


@router.post("", response_model=BidRead, status_code=201)
async def create_bid_endpoint(
    bid_in: BidCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Submit a bid on an open gig."""
    bid = await create_bid(session, bid_in.gig_id, user_id, bid_in.message, bid_in.price)
    await session.commit()

    [enriched] = await enrich_bids(session, [bid])
    return enriched


@router.get("/{gig_id}", response_model=List[BidRead])
async def list_bids_endpoint(
    gig_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """List all bids on a gig, newest first. Owner only."""
    bids = await list_bids_for_gig(session, gig_id, user_id)
    return await enrich_bids(session, bids)


@router.patch("/{bid_id}/hire", response_model=HireResponse)
async def hire_bid_endpoint(
    bid_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    coordinator: HireCoordinator = Depends(get_hire_coordinator),
):
    """Hire the freelancer behind a bid. Owner only."""
    result = await coordinator.hire(bid_id, user_id)
    return HireResponse(bid=to_read(result.bid, result.freelancer), message=result.message)
