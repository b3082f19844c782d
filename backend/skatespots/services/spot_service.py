"""
SkateSpots Backend - Spot Service (Business Logic Orchestrator)
================================================================

What:  Spot use cases: list/search, fetch, create with images, add an image,
       and locate an image file by position.
How:   Composes SpotStore (database) and FileService (upload directory) and
       enforces the image rules:
         - a spot created without images gets the default sentinel
         - attaching a real image removes the sentinel
Who:   Called by the spot route handlers.

Create Flow (POST /api/spots):
    ┌──────────┐    ┌─────────────┐    ┌─────────────┐    ┌──────────┐
    │  Fields  │───▶│ Parse coords│───▶│ Store files │───▶│  Insert  │
    │  (Route) │    │ & numbers   │    │ (FileServ)  │    │ (Store)  │
    └──────────┘    └─────────────┘    └─────────────┘    └──────────┘

    Insert fails → the files written for this request are removed.

The service is stateless; the database session is passed in per call.
"""

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from skatespots.config import settings
from skatespots.exceptions import DatabaseError, NotFoundError, SkateSpotsError
from skatespots.schemas.spot import SpotCreate, SpotResponse
from skatespots.services.file_service import file_service
from skatespots.services.spot_store import SpotStore, parse_spot_id

logger = logging.getLogger(__name__)

# (original filename, file bytes) as read from the multipart request
UploadedFile = Tuple[Optional[str], bytes]


def parse_coords(raw: Any) -> Dict[str, Any]:
    """
    Decode the `coords` field of a create request.

    Multipart forms send it as a JSON string ('{"lat": 60.1, "lng": 24.9}');
    JSON bodies send an object. Anything undecodable, or decoding to
    something other than an object, becomes {} and is logged.
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed coords value: %.100s", raw)
            return {}
        if isinstance(decoded, dict):
            return decoded
    logger.warning("Ignoring coords value that is not an object: %.100r", raw)
    return {}


def is_default_image(image_url: str) -> bool:
    sentinel = settings.default_image_url
    return image_url == sentinel or image_url.endswith("/" + PurePosixPath(sentinel).name)


class SpotService:
    """
    Business logic layer for spot operations.

    Error Handling Strategy:
        Store and file errors arrive already translated (DatabaseError,
        FileStorageError) and propagate unchanged. Missing spots become
        NotFoundError here.
    """

    def build_spot_create(self, fields: Mapping[str, Any]) -> SpotCreate:
        """
        Turn raw request fields into a SpotCreate.

        Raises:
            DatabaseError: a field cannot be coerced to its column type
                           (e.g. ratingFlat="lots"), the same outcome as the
                           store rejecting the value.
        """
        payload = dict(fields)
        payload["coords"] = parse_coords(fields.get("coords"))
        try:
            return SpotCreate.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning("Spot fields rejected: %s", e.errors(include_url=False))
            raise DatabaseError(
                message="Saving the skate spot failed.",
                context={"fields": [".".join(map(str, err["loc"])) for err in e.errors()]},
            )

    async def list_spots(self, db: AsyncSession, query: Optional[str] = None) -> List[SpotResponse]:
        spots = await SpotStore(db).find_all(query)
        return [SpotResponse.model_validate(spot) for spot in spots]

    async def get_spot(self, db: AsyncSession, spot_id: str) -> SpotResponse:
        """
        Raises:
            NotFoundError: no spot with this ID (→ 404)
            DatabaseError: malformed ID or query failure (→ 500)
        """
        spot = await SpotStore(db).find_by_id(spot_id)
        if spot is None:
            raise NotFoundError(resource="spot", resource_id=spot_id)
        return SpotResponse.model_validate(spot)

    async def create_spot(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        files: Sequence[UploadedFile] = (),
    ) -> SpotResponse:
        """
        Create a spot with zero or more images.

        Args:
            db:     Async database session
            fields: name, city, description, category, ratingFlat,
                    ratingCrowd, coords (JSON string or object)
            files:  Uploaded images in submission order

        Returns:
            The stored spot; imageUrl lists the uploads or the sentinel.
        """
        data = self.build_spot_create(fields)

        stored = await file_service.store_files(files) if files else []
        try:
            spot = await SpotStore(db).insert(data, [url for _, url in stored])
        except SkateSpotsError:
            for absolute_path, _ in stored:
                await file_service.cleanup_file(absolute_path)
            raise

        return SpotResponse.model_validate(spot)

    async def add_image(
        self,
        db: AsyncSession,
        spot_id: str,
        upload: Optional[UploadedFile],
    ) -> SpotResponse:
        """
        Append one image to a spot, dropping the default sentinel.

        The spot is looked up before anything is written, so an unknown ID
        leaves no file behind. Without an upload the stored record is
        returned unchanged.
        """
        store = SpotStore(db)
        spot = await store.find_by_id(spot_id)
        if spot is None:
            raise NotFoundError(resource="spot", resource_id=spot_id)

        if upload is None:
            logger.info("add-image for spot %s carried no file; nothing to do", spot_id)
            return SpotResponse.model_validate(spot)

        absolute_path, url = await file_service.store_file(*upload)
        spot.image_url = [u for u in spot.image_url if not is_default_image(u)] + [url]
        try:
            await store.update(spot)
        except SkateSpotsError:
            await file_service.cleanup_file(absolute_path)
            raise

        logger.info("Image %s added to spot %s", url, spot_id)
        return SpotResponse.model_validate(spot)

    async def get_image_path(self, db: AsyncSession, spot_id: str, index: str) -> Path:
        """
        Locate the file behind imageUrl[index].

        Malformed IDs and indexes are treated like missing ones. The default
        sentinel is not a stored upload, so it is "not found" as well.

        Raises:
            NotFoundError: spot, index or file missing (→ 404)
            DatabaseError: query failure (→ 500)
        """
        try:
            parse_spot_id(spot_id)
        except DatabaseError:
            raise NotFoundError(resource="spot", resource_id=spot_id)

        spot = await SpotStore(db).find_by_id(spot_id)
        if spot is None:
            raise NotFoundError(resource="spot", resource_id=spot_id)

        if not (index.isascii() and index.isdigit()) or int(index) >= len(spot.image_url or []):
            raise NotFoundError(resource="image", resource_id=f"{spot_id}/{index}")

        path = file_service.resolve(spot.image_url[int(index)])
        if path is None or not path.is_file():
            raise NotFoundError(resource="image", resource_id=f"{spot_id}/{index}")
        return path


spot_service = SpotService()
