"""
API v1 Router

Gig, bid and notification endpoints.
"""

from fastapi import APIRouter
from . import bids, gigs, notifications

router = APIRouter()

router.include_router(gigs.router, prefix="/gigs", tags=["Gigs"])
router.include_router(bids.router, prefix="/bids", tags=["Bids"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/gigs",
            "/bids",
            "/bids/{bidId}/hire",
            "/notifications/ws",
        ],
    }
