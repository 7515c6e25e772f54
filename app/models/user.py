"""User model.

Identity is owned by the external auth provider; this table only carries what
gigs and bids display about a person.
"""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class User(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "users"

    name: str = Field(nullable=False)
    email: Optional[str] = Field(default=None, unique=True, index=True)
