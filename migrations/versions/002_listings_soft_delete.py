"""Soft delete for listings; RESTRICT on history foreign keys.

Adds listings.deleted_at. A deleted listing is hidden from bookings, the
calendar and reservation lists via `deleted_at IS NULL` at the application
layer, while its reservations and transactions keep their FK target.

Users, listings and reservations no longer cascade: removing a user or a
listing that still has reservations fails instead of erasing the history.

Revision ID: 002_listings_soft_delete
Revises: 001_initial_schema
Create Date: 2026-10-19
"""

from __future__ import annotations

from pathlib import Path

from alembic import op

revision = "002_listings_soft_delete"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None

_SQL_FILE = Path(__file__).resolve().parents[1] / "sql" / "002_listings_soft_delete.sql"


def upgrade() -> None:
    op.get_bind().exec_driver_sql(_SQL_FILE.read_text(encoding="utf-8"))


def downgrade() -> None:
    # NOTE: soft-deleted listings become visible again after downgrade.
    op.get_bind().exec_driver_sql(
        """
        ALTER TABLE reservations
            DROP CONSTRAINT reservations_listing_id_fkey,
            ADD CONSTRAINT reservations_listing_id_fkey
                FOREIGN KEY (listing_id) REFERENCES listings (id) ON DELETE CASCADE;
        ALTER TABLE reservations
            DROP CONSTRAINT reservations_user_id_fkey,
            ADD CONSTRAINT reservations_user_id_fkey
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE;
        ALTER TABLE listings
            DROP CONSTRAINT listings_user_id_fkey,
            ADD CONSTRAINT listings_user_id_fkey
                FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE;
        DROP INDEX IF EXISTS idx_listings_deleted_at;
        ALTER TABLE listings DROP COLUMN IF EXISTS deleted_at;
        """
    )
