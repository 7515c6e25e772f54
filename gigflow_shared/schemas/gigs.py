"""Gig-related Pydantic schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import (
    AMOUNT_MAX,
    AMOUNT_MIN,
    DESCRIPTION_MAX,
    DESCRIPTION_MIN,
    GigStatus,
    TITLE_MAX,
    TITLE_MIN,
    UserSummary,
)


class GigCreate(BaseModel):
    """Request body for POST /gigs."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=TITLE_MIN, max_length=TITLE_MAX)
    description: str = Field(min_length=DESCRIPTION_MIN, max_length=DESCRIPTION_MAX)
    budget: float = Field(ge=AMOUNT_MIN, le=AMOUNT_MAX)


class GigRead(BaseModel):
    id: UUID
    title: str
    description: str
    budget: float
    owner_id: UUID
    owner: Optional[UserSummary] = None
    status: GigStatus
    created_at: datetime
    updated_at: datetime
