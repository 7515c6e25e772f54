"""Users, gigs and bids.

Revision ID: 0001_gigs_and_bids
Revises:
Create Date: 2026-10-12 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel

revision: str = "0001_gigs_and_bids"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    # Gigs
    op.create_table(
        "gigs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False),
        sa.Column("budget", sa.Float(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("status", sqlmodel.sql.sqltypes.AutoString(), server_default="open", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_gigs_id"), "gigs", ["id"], unique=False)
    op.create_index(op.f("ix_gigs_owner_id"), "gigs", ["owner_id"], unique=False)
    op.create_index(op.f("ix_gigs_status"), "gigs", ["status"], unique=False)
    op.create_index("ix_gigs_status_created_at", "gigs", ["status", "created_at"], unique=False)
    op.create_index("ix_gigs_owner_id_status", "gigs", ["owner_id", "status"], unique=False)

    # Bids: one per freelancer per gig
    op.create_table(
        "bids",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("gig_id", sa.Uuid(), nullable=False),
        sa.Column("freelancer_id", sa.Uuid(), nullable=False),
        sa.Column("message", sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("status", sqlmodel.sql.sqltypes.AutoString(), server_default="pending", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["gig_id"], ["gigs.id"]),
        sa.ForeignKeyConstraint(["freelancer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gig_id", "freelancer_id", name="uq_bids_gig_id_freelancer_id"),
    )
    op.create_index(op.f("ix_bids_id"), "bids", ["id"], unique=False)
    op.create_index(op.f("ix_bids_gig_id"), "bids", ["gig_id"], unique=False)
    op.create_index(op.f("ix_bids_freelancer_id"), "bids", ["freelancer_id"], unique=False)
    op.create_index(op.f("ix_bids_status"), "bids", ["status"], unique=False)
    op.create_index("ix_bids_gig_id_status", "bids", ["gig_id", "status"], unique=False)
    op.create_index("ix_bids_freelancer_id_status", "bids", ["freelancer_id", "status"], unique=False)


def downgrade() -> None:
    op.drop_table("bids")
    op.drop_table("gigs")
    op.drop_table("users")
