"""
Hire transaction: assign a gig to exactly one bid.

A hire is one atomic unit of work:

1. load the bid and its gig, check the requester owns the gig and it is open;
2. flip the gig ``open -> assigned`` with a conditional UPDATE guarded on
   ``status = 'open'``; zero matched rows means a concurrent hire won;
3. mark the winning bid hired and every other pending bid on the gig rejected;
4. commit.

Only after the commit succeeds is the freelancer notified. Notification is
best effort: failures are logged and never undo or fail the hire.

Correctness rests on the database evaluating the status guard at write time,
not on in-process locks, so it holds across server processes.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.errors import (
    AlreadyAssigned,
    Forbidden,
    InternalError,
    InvalidState,
    LostRace,
    NotFound,
    STORAGE_ERRORS,
)
from app.core.notifications import HireNotifier
from app.models.bid import Bid
from app.models.gig import Gig
from app.models.user import User
from app.services import store
from gigflow_shared.schemas.common import BidStatus, GigStatus, UserSummary

log = structlog.get_logger()

# hires still running after their caller went away; the loop only keeps weak references
_in_flight: set[asyncio.Task] = set()


def _log_orphaned_outcome(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.warning(
            "hire.orphaned_failure",
            code=getattr(exc, "code", type(exc).__name__),
            error=str(exc),
        )


@dataclass
class HiredResult:
    bid: Bid
    message: str
    gig_id: uuid.UUID
    gig_title: str
    freelancer: Optional[UserSummary] = None


# ---------------------------------------------------------------------------
# Transition steps (all run inside the caller's transaction)
# ---------------------------------------------------------------------------


async def _claim_gig(session: AsyncSession, gig_id: uuid.UUID) -> bool:
    return await store.conditional_update(
        session,
        Gig,
        gig_id,
        expected={"status": GigStatus.OPEN.value},
        values={"status": GigStatus.ASSIGNED.value},
    )


async def _mark_hired(session: AsyncSession, bid_id: uuid.UUID) -> bool:
    return await store.conditional_update(
        session,
        Bid,
        bid_id,
        expected={"status": BidStatus.PENDING.value},
        values={"status": BidStatus.HIRED.value},
    )


async def _reject_losing_bids(
    session: AsyncSession, gig_id: uuid.UUID, winning_bid_id: uuid.UUID
) -> int:
    return await store.update_many(
        session,
        Bid,
        [
            Bid.gig_id == gig_id,
            Bid.id != winning_bid_id,
            Bid.status == BidStatus.PENDING.value,
        ],
        {"status": BidStatus.REJECTED.value},
    )


async def _transition(
    session: AsyncSession, bid_id: uuid.UUID, requester_id: uuid.UUID
) -> HiredResult:
    bid = await store.read(session, Bid, bid_id)
    if not bid:
        raise NotFound("Bid not found")

    gig = await store.read(session, Gig, bid.gig_id)
    if not gig:
        raise NotFound("Gig not found")
    if gig.owner_id != requester_id:
        raise Forbidden("Only the gig owner can hire for this gig")
    if gig.status != GigStatus.OPEN.value:
        raise AlreadyAssigned()

    if not await _claim_gig(session, gig.id):
        log.info("hire.lost_race", gig_id=str(gig.id), bid_id=str(bid_id))
        raise LostRace()

    if not await _mark_hired(session, bid.id):
        # gig was open, so no bid on it can have left pending; roll everything back
        raise InvalidState("Bid is no longer pending")

    rejected = await _reject_losing_bids(session, gig.id, bid.id)
    # reload the winner so its status and updated_at reflect the UPDATE
    await session.refresh(bid)

    freelancer = await store.read(session, User, bid.freelancer_id)
    summary = (
        UserSummary(id=freelancer.id, name=freelancer.name, email=freelancer.email)
        if freelancer
        else None
    )
    name = freelancer.name if freelancer else "Freelancer"

    log.info(
        "hire.applied",
        gig_id=str(gig.id),
        bid_id=str(bid.id),
        freelancer_id=str(bid.freelancer_id),
        rejected=rejected,
    )
    return HiredResult(
        bid=bid,
        message=f"{name} has been hired successfully!",
        gig_id=gig.id,
        gig_title=gig.title,
        freelancer=summary,
    )


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


class HireCoordinator:
    """Runs hire transactions against a session factory and notifies winners."""

    def __init__(
        self,
        session_factory: sessionmaker,
        notifier: Optional[HireNotifier] = None,
    ):
        self._session_factory = session_factory
        self._notifier = notifier

    async def hire(self, bid_id: uuid.UUID, requester_id: uuid.UUID) -> HiredResult:
        """
        Hire the freelancer behind ``bid_id`` on behalf of ``requester_id``.

        Raises NotFound, Forbidden, AlreadyAssigned (LostRace for a lost
        concurrent race) or InternalError. None of them leave partial state.

        The work runs shielded: if the caller is cancelled mid-flight the
        transaction still commits or rolls back, and a committed hire still
        notifies the freelancer.
        """
        task = asyncio.ensure_future(self._hire_and_notify(bid_id, requester_id))
        _in_flight.add(task)
        task.add_done_callback(_in_flight.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # nobody awaits the outcome now; collect it so a failure is logged
            task.add_done_callback(_log_orphaned_outcome)
            raise

    async def _hire_and_notify(self, bid_id: uuid.UUID, requester_id: uuid.UUID) -> HiredResult:
        result = await self._commit(bid_id, requester_id)
        log.info("hire.committed", gig_id=str(result.gig_id), bid_id=str(bid_id))
        await self._notify(result)
        return result

    async def _commit(self, bid_id: uuid.UUID, requester_id: uuid.UUID) -> HiredResult:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await _transition(session, bid_id, requester_id)
        except STORAGE_ERRORS as exc:
            log.error("hire.commit_failed", bid_id=str(bid_id), error=str(exc))
            raise InternalError("The hire could not be completed. Please retry.") from exc

    async def _notify(self, result: HiredResult) -> None:
        if self._notifier is None:
            return
        try:
            delivered = await self._notifier.notify_hired(
                result.bid.freelancer_id, result.gig_id, result.gig_title
            )
        except Exception:
            log.exception(
                "hire.notification_failed",
                gig_id=str(result.gig_id),
                freelancer_id=str(result.bid.freelancer_id),
            )
        else:
            log.info(
                "hire.notified",
                freelancer_id=str(result.bid.freelancer_id),
                connections=delivered,
            )
