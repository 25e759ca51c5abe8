"""Marketplace schema: users, listings, reservations, transactions, availability.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from pathlib import Path

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

SQL_DIR = Path(__file__).resolve().parents[1] / "sql"


def upgrade() -> None:
    sql = (SQL_DIR / "001_initial.sql").read_text(encoding="utf-8")
    op.get_bind().exec_driver_sql(sql)


def downgrade() -> None:
    op.get_bind().exec_driver_sql(
        """
        DROP TABLE IF EXISTS availability;
        DROP TABLE IF EXISTS transactions;
        DROP TABLE IF EXISTS reservations;
        DROP TABLE IF EXISTS listing_images;
        DROP TABLE IF EXISTS listings;
        DROP TABLE IF EXISTS users;
        """
    )
