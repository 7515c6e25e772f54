"""Gig model."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Gig(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "gigs"
    __table_args__ = (
        sa.Index("ix_gigs_status_created_at", "status", "created_at"),
        sa.Index("ix_gigs_owner_id_status", "owner_id", "status"),
    )

    title: str = Field(nullable=False, max_length=100)
    description: str = Field(nullable=False, max_length=2000)
    budget: float = Field(nullable=False)
    owner_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    status: str = Field(nullable=False, default="open", index=True)  # open | assigned
