"""
SkateSpots Backend - Spot SQLAlchemy Model
============================================

What:  ORM model for the `spots` table, the only persisted entity.
How:   Portable column types (Uuid, JSON, Float, Text) so the same model runs
       on PostgreSQL in production and SQLite in tests. Alembic migration
       001 creates the same table.

Columns:
    - id:           UUID assigned on insert, never changed
    - name/city/description: optional free text, the searchable fields
    - category, rating_flat, rating_crowd: optional numbers, meaning is
      up to the frontend
    - coords:       {"lat": float | null, "lng": float | null} as JSON
    - image_url:    ordered JSON list of image paths, never empty
    - created_at:   insertion timestamp, used to list spots in insertion order
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Float, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from skatespots.config import settings
from skatespots.database import Base


def default_image_urls() -> List[str]:
    """Fresh single-element list holding the default sentinel image."""
    return [settings.default_image_url]


class Spot(Base):
    """
    A skate location record.

    Lifecycle:
        1. Created by POST /api/spots, with uploaded images or the sentinel
        2. Mutated only by POST /api/spots/{id}/add-image (sentinel dropped,
           one image appended)
        3. Never deleted
    """

    __tablename__ = "spots"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Descriptive Fields ────────────────────────────────────────────────
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Classifier & Ratings ──────────────────────────────────────────────
    category: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rating_flat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    rating_crowd: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # ── Location ──────────────────────────────────────────────────────────
    coords: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ── Images ────────────────────────────────────────────────────────────
    # Reassign the whole list when changing it: in-place appends on a plain
    # JSON column are not tracked by the unit of work.
    image_url: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=default_image_urls,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_spots_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Spot(id={self.id}, name='{self.name}', city='{self.city}')>"
