"""
Gig endpoints: create, list/search, get.

- Listing is public and newest-first; ``search`` matches title or description.
- Creation requires an authenticated caller, who becomes the immutable owner.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user_id
from app.core.database import get_session
from app.services.gigs import create_gig, enrich_gigs, get_gig, list_gigs
from gigflow_shared.schemas.common import GigStatus
from gigflow_shared.schemas.gigs import GigCreate, GigRead

router = APIRouter()


@router.get("", response_model=List[GigRead])
async def list_gigs_endpoint(
    search: Optional[str] = Query(None, max_length=200),
    status: Optional[GigStatus] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """List gigs, newest first, optionally filtered by text and status."""
    gigs = await list_gigs(session, text=search, status=status, page=page, per_page=per_page).all()
    return await enrich_gigs(session, gigs)


@router.post("", response_model=GigRead, status_code=201)
async def create_gig_endpoint(
    gig_in: GigCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Post a new gig owned by the caller."""
    gig = await create_gig(
        session, user_id, gig_in.title, gig_in.description, gig_in.budget
    )
    await session.commit()

    [enriched] = await enrich_gigs(session, [gig])
    return enriched


@router.get("/{gig_id}", response_model=GigRead)
async def get_gig_endpoint(
    gig_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    """Get a single gig with its owner."""
    gig = await get_gig(session, gig_id)
    [enriched] = await enrich_gigs(session, [gig])
    return enriched
