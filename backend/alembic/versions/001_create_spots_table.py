"""Create spots table

Revision ID: 001
Revises: None
Create Date: 2025-05-04 00:00:00.000000+00:00

What:  Creates the `spots` table holding every skate spot record.
How:   Portable types only (Uuid, JSON, Float, Text), matching
       skatespots/models/spot.py, so PostgreSQL and SQLite both work.

Rollback: downgrade() drops the table and all spot data with it.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "spots",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Float(), nullable=True),
        sa.Column("rating_flat", sa.Float(), nullable=True),
        sa.Column("rating_crowd", sa.Float(), nullable=True),
        # {"lat": ..., "lng": ...}
        sa.Column("coords", sa.JSON(), nullable=True),
        # Ordered list of image paths, never empty
        sa.Column("image_url", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Listings are returned in insertion order
    op.create_index("idx_spots_created_at", "spots", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_spots_created_at", table_name="spots")
    op.drop_table("spots")
