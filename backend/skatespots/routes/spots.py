"""
SkateSpots Backend - Spot Route Handlers
==========================================

What:  The /api/spots endpoints: list/search, fetch, create, image streaming
       and add-image.
How:   Extracts query params, form fields and files, delegates to SpotService,
       returns JSON (or the image file).
Who:   Called by the frontend map, list and spot-detail views.

Create accepts two encodings:
    - multipart/form-data: text fields + any number of `images` files,
      `coords` as a JSON string
    - application/json:    the same fields, `coords` as an object, no files
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile

from skatespots.database import get_db_session
from skatespots.exceptions import ValidationError
from skatespots.schemas.spot import ErrorResponse, SpotResponse
from skatespots.services.spot_service import UploadedFile, spot_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Spots"])


async def _read_upload(upload: StarletteUploadFile) -> UploadedFile:
    try:
        return upload.filename, await upload.read()
    finally:
        await upload.close()


def _is_empty_part(upload: StarletteUploadFile) -> bool:
    """A file input submitted with nothing selected."""
    return not upload.filename and not upload.size


@router.get(
    "/spots",
    response_model=List[SpotResponse],
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List or search spots",
)
async def list_spots(
    q: Optional[str] = Query(
        default=None,
        description="Case-insensitive text matched against name, city and description",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[SpotResponse]:
    """All spots in insertion order, or those whose name, city or description contain `q`."""
    return await spot_service.list_spots(db=db, query=q)


@router.get(
    "/spots/{spot_id}",
    response_model=SpotResponse,
    responses={
        404: {"description": "Spot not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Get a single spot by ID",
)
async def get_spot(
    spot_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> SpotResponse:
    return await spot_service.get_spot(db=db, spot_id=spot_id)


@router.post(
    "/spots",
    status_code=201,
    response_model=SpotResponse,
    responses={
        201: {"description": "Spot created", "model": SpotResponse},
        500: {"description": "Store or upload error", "model": ErrorResponse},
    },
    summary="Create a spot with zero or more images",
)
async def create_spot(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> SpotResponse:
    """
    Create a spot.

    Processing Steps:
        1. Read fields and `images` files from the body
        2. SpotService parses coords, stores the files, inserts the record
        3. 201 with the stored spot
    """
    content_type = request.headers.get("content-type", "")
    fields: Dict[str, Any] = {}
    files: List[UploadedFile] = []

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError(message="Request body is not valid JSON", field="body")
        if not isinstance(body, dict):
            raise ValidationError(message="Request body must be a JSON object", field="body")
        fields = body

    elif content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        try:
            for key, value in form.multi_items():
                if isinstance(value, StarletteUploadFile):
                    if key == "images" and not _is_empty_part(value):
                        files.append(await _read_upload(value))
                else:
                    fields[key] = value
        finally:
            await form.close()

    logger.info(
        "Received create request: name=%r, city=%r, images=%d",
        fields.get("name"),
        fields.get("city"),
        len(files),
    )
    return await spot_service.create_spot(db=db, fields=fields, files=files)


@router.get(
    "/spots/{spot_id}/image/{index}",
    response_class=FileResponse,
    responses={
        200: {"description": "Image file"},
        404: {"description": "Spot, index or file not found", "model": ErrorResponse},
    },
    summary="Stream one image of a spot by its position",
)
async def get_spot_image(
    spot_id: str,
    index: str,
    db: AsyncSession = Depends(get_db_session),
) -> FileResponse:
    """
    Serve imageUrl[index] of a spot.

    Positions shift when the default sentinel is replaced by the first real
    image; clients should read imageUrl first.
    """
    path = await spot_service.get_image_path(db=db, spot_id=spot_id, index=index)
    return FileResponse(path=str(path))


@router.post(
    "/spots/{spot_id}/add-image",
    response_model=SpotResponse,
    responses={
        404: {"description": "Spot not found", "model": ErrorResponse},
        500: {"description": "Store or upload error", "model": ErrorResponse},
    },
    summary="Append an image to a spot",
)
async def add_spot_image(
    spot_id: str,
    image: Optional[UploadFile] = File(default=None, description="Image file to attach"),
    db: AsyncSession = Depends(get_db_session),
) -> SpotResponse:
    """Attach one uploaded image; the default sentinel is dropped from imageUrl."""
    upload = None
    if image is not None and not _is_empty_part(image):
        upload = await _read_upload(image)
    elif image is not None:
        await image.close()
    return await spot_service.add_image(db=db, spot_id=spot_id, upload=upload)
