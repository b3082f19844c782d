"""
SkateSpots Backend - Spot Store Adapter
=========================================

What:  All database access for spots: find-all-with-filter, find-by-id,
       insert, update.
How:   Wraps one AsyncSession. Writes commit immediately so the record a
       route returns is the record that is stored. Every SQLAlchemy failure
       leaves as DatabaseError; nothing database-specific escapes this module.
Who:   Used by SpotService and the spot routes, one instance per request.

Search:
    The query is matched as a literal, case-insensitive substring against
    name, city or description (OR). LIKE wildcards in the query are escaped,
    so "50%" finds "50% off ledge" and nothing else. Empty query → all spots.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skatespots.exceptions import DatabaseError
from skatespots.models.spot import Spot, default_image_urls
from skatespots.schemas.spot import SpotCreate

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"


def _like_pattern(query: str) -> str:
    escaped = (
        query.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def parse_spot_id(spot_id: str) -> uuid.UUID:
    """
    Parse a path ID into the store's identifier type.

    Raises:
        DatabaseError: not a valid UUID (reported as a generic server error).
    """
    try:
        return uuid.UUID(str(spot_id))
    except (ValueError, TypeError, AttributeError):
        raise DatabaseError(
            message="Error fetching the spot.",
            context={"spot_id": spot_id, "reason": "malformed identifier"},
        )


class SpotStore:
    """Store adapter over the `spots` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, query: Optional[str] = None) -> List[Spot]:
        """
        List spots in insertion order, optionally filtered.

        Args:
            query: Free text; matches name, city or description case-insensitively.
        """
        stmt = select(Spot)
        if query:
            pattern = _like_pattern(query)
            stmt = stmt.where(
                or_(
                    Spot.name.ilike(pattern, escape=_LIKE_ESCAPE),
                    Spot.city.ilike(pattern, escape=_LIKE_ESCAPE),
                    Spot.description.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
        stmt = stmt.order_by(Spot.created_at.asc())

        try:
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing spots (q=%r): %s", query, str(e), exc_info=True)
            raise DatabaseError(
                message="Fetching spots failed.",
                context={"error_type": type(e).__name__},
            )

    async def find_by_id(self, spot_id: str) -> Optional[Spot]:
        """
        Fetch one spot.

        Returns:
            The spot, or None when no record has this ID.

        Raises:
            DatabaseError: malformed ID or query failure.
        """
        key = parse_spot_id(spot_id)
        try:
            result = await self.db.execute(select(Spot).where(Spot.id == key))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching spot %s: %s", spot_id, str(e))
            raise DatabaseError(
                message="Error fetching the spot.",
                context={"spot_id": spot_id, "error_type": type(e).__name__},
            )

    async def insert(self, data: SpotCreate, image_urls: Optional[List[str]] = None) -> Spot:
        """
        Persist a new spot and assign its ID.

        An empty or missing image list is replaced by the default sentinel.
        """
        spot = Spot(
            name=data.name,
            city=data.city,
            description=data.description,
            category=data.category,
            rating_flat=data.rating_flat,
            rating_crowd=data.rating_crowd,
            coords=data.coords.model_dump(),
            image_url=list(image_urls) if image_urls else default_image_urls(),
        )
        try:
            self.db.add(spot)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error inserting spot: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Saving the skate spot failed.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Spot created: %s (%d images)", spot.id, len(spot.image_url))
        return spot

    async def update(self, spot: Spot) -> Spot:
        """Persist pending changes on an already-loaded spot."""
        try:
            self.db.add(spot)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Database error updating spot %s: %s", spot.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Saving the spot image failed.",
                context={"spot_id": str(spot.id), "error_type": type(e).__name__},
            )
        return spot
