#!/usr/bin/env python3
"""Seed a development database with sample users, gigs, and bids.

Usage:
    python scripts/seed_dev_data.py

Uses GF_DATABASE_URL (or the default local Postgres). Re-running is safe:
rows are keyed by fixed UUIDs and existing ones are left alone. Prints a
bearer token per user so the API can be exercised straight away.
"""

import asyncio
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt
from sqlalchemy import text

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.config import get_settings  # noqa: E402
from app.core.database import engine, get_session_context, init_db  # noqa: E402

# Deterministic UUIDs for reproducibility
CLIENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")
FREELANCER_ID = uuid.UUID("00000000-0000-0000-0000-000000000011")
BUILDER_ID = uuid.UUID("00000000-0000-0000-0000-000000000012")
GIG_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000001{i:02d}") for i in range(3)]
BID_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000002{i:02d}") for i in range(3)]

USERS = [
    (CLIENT_ID, "John Client", "client@example.com"),
    (FREELANCER_ID, "Jane Freelancer", "freelancer@example.com"),
    (BUILDER_ID, "Bob Builder", "bob@example.com"),
]

GIGS = [
    (
        "Build a React E-commerce Site",
        "I need a full-stack developer to build a modern e-commerce platform using "
        "React, Node.js, and MongoDB. Must include stripe integration.",
        1500,
        CLIENT_ID,
    ),
    (
        "Design a Company Logo",
        "Looking for a creative graphic designer to create a minimalist logo for my tech startup.",
        300,
        CLIENT_ID,
    ),
    (
        "Fix Backend API Bugs",
        "We have some issues with our Express API endpoints. Need an expert to debug and optimize.",
        500,
        BUILDER_ID,
    ),
]

# (gig index, freelancer, price, message)
BIDS = [
    (0, FREELANCER_ID, 1400, "I have built several React storefronts with Stripe checkout."),
    (0, BUILDER_ID, 1250, "Full-stack developer, can start on Monday and ship in four weeks."),
    (2, FREELANCER_ID, 450, "Happy to profile and fix the slow endpoints this week."),
]


def _token(user_id: uuid.UUID) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {"sub": str(user_id), "iat": now, "exp": now + timedelta(days=7)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


async def seed():
    await init_db()

    async with get_session_context() as session:
        # Users
        for uid, name, email in USERS:
            await session.execute(text("""
                INSERT INTO users (id, name, email, created_at) VALUES (:id, :name, :email, :now)
                ON CONFLICT (id) DO NOTHING
            """), {"id": uid, "name": name, "email": email, "now": datetime.now(timezone.utc)})

        # Gigs, oldest first so the feed lists them in reverse
        base_time = datetime.now(timezone.utc) - timedelta(hours=len(GIGS))
        for i, (gid, (title, description, budget, owner)) in enumerate(zip(GIG_IDS, GIGS)):
            created = base_time + timedelta(hours=i)
            await session.execute(text("""
                INSERT INTO gigs (id, title, description, budget, owner_id, status, created_at, updated_at)
                VALUES (:id, :title, :description, :budget, :owner, 'open', :created, :created)
                ON CONFLICT (id) DO NOTHING
            """), {
                "id": gid, "title": title, "description": description,
                "budget": budget, "owner": owner, "created": created,
            })

        # Bids (all pending; hiring is left to the API)
        for bid_id, (gig_idx, freelancer, price, message) in zip(BID_IDS, BIDS):
            now = datetime.now(timezone.utc)
            await session.execute(text("""
                INSERT INTO bids (id, gig_id, freelancer_id, message, price, status, created_at, updated_at)
                VALUES (:id, :gig, :freelancer, :message, :price, 'pending', :now, :now)
                ON CONFLICT (id) DO NOTHING
            """), {
                "id": bid_id, "gig": GIG_IDS[gig_idx], "freelancer": freelancer,
                "message": message, "price": price, "now": now,
            })

    await engine.dispose()

    print("Seeded dev data:")
    print(f"  Users:  {len(USERS)}")
    print(f"  Gigs:   {len(GIGS)}")
    print(f"  Bids:   {len(BIDS)}")
    print()
    print("Bearer tokens (7 days):")
    for uid, name, email in USERS:
        print(f"  {name} <{email}>")
        print(f"    {_token(uid)}")


if __name__ == "__main__":
    asyncio.run(seed())
