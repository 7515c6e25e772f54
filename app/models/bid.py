"""Bid model."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Bid(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "bids"
    __table_args__ = (
        # one bid per freelancer per gig; duplicate inserts fail here, not in app code
        sa.UniqueConstraint("gig_id", "freelancer_id", name="uq_bids_gig_id_freelancer_id"),
        sa.Index("ix_bids_gig_id_status", "gig_id", "status"),
        sa.Index("ix_bids_freelancer_id_status", "freelancer_id", "status"),
    )

    gig_id: uuid.UUID = Field(foreign_key="gigs.id", nullable=False, index=True)
    freelancer_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    message: str = Field(nullable=False, max_length=1000)
    price: float = Field(nullable=False)
    status: str = Field(nullable=False, default="pending", index=True)  # pending | hired | rejected
