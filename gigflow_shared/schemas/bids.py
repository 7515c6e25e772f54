"""Bid and hiring schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import AMOUNT_MAX, AMOUNT_MIN, BidStatus, MESSAGE_MAX, MESSAGE_MIN, UserSummary


class BidFields(BaseModel):
    """Freelancer-supplied bid fields."""

    model_config = ConfigDict(str_strip_whitespace=True)

    message: str = Field(min_length=MESSAGE_MIN, max_length=MESSAGE_MAX)
    price: float = Field(ge=AMOUNT_MIN, le=AMOUNT_MAX)


class BidCreate(BidFields):
    """Request body for POST /bids."""
    gig_id: UUID


class BidRead(BaseModel):
    id: UUID
    gig_id: UUID
    freelancer_id: UUID
    freelancer: Optional[UserSummary] = None
    message: str
    price: float
    status: BidStatus
    created_at: datetime
    updated_at: datetime


class HireResponse(BaseModel):
    """Response body for PATCH /bids/{bidId}/hire."""
    bid: BidRead
    message: str


class HiredNotification(BaseModel):
    """Payload pushed to the hired freelancer's live connections."""
    type: str = "hired"
    message: str
    gig_id: UUID
    gig_title: str
    timestamp: datetime
