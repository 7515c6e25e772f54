from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class GigStatus(str, Enum):
    OPEN = "open"
    ASSIGNED = "assigned"


class BidStatus(str, Enum):
    PENDING = "pending"
    HIRED = "hired"
    REJECTED = "rejected"


# Field bounds shared by request schemas and the service layer
TITLE_MIN, TITLE_MAX = 5, 100
DESCRIPTION_MIN, DESCRIPTION_MAX = 20, 2000
MESSAGE_MIN, MESSAGE_MAX = 10, 1000
AMOUNT_MIN, AMOUNT_MAX = 1, 1_000_000


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None
