# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import CreatedAtMixin, TimestampMixin, UUIDMixin  # noqa: F401
from .user import User  # noqa: F401
from .gig import Gig  # noqa: F401
from .bid import Bid  # noqa: F401
