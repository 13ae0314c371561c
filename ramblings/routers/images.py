# ramblings/routers/images.py
"""
Image upload and management API.
Binaries are served from ``/api/images/serve``; everything else is admin only.
"""
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form, Query, Response, status
from typing import List, Optional
import logging

from ramblings.core.auth import require_admin
from ramblings.core.config import settings
from ramblings.core.storage import ImageStorage, get_image_storage, media_type_for
from ramblings.crud.images import image_crud
from ramblings.database.engine import get_store
from ramblings.database.store import ContentStore
from ramblings.models.blog import Image
from ramblings.schemas.common import SuccessResponse
from ramblings.schemas.images import ImageStats, ImageUpdate

router = APIRouter(prefix="/api/images", tags=["images"])
logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"


@router.post("", response_model=Image, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    alt: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    store: ContentStore = Depends(get_store),
    storage: ImageStorage = Depends(get_image_storage),
    _: bool = Depends(require_admin),
):
    """
    Upload an image.

    **Supported file types:** JPEG, PNG, GIF, WEBP, SVG

    **Size limit:** 10MB

    **Permissions**: Admin only
    """
    mime_type = file.content_type or ""
    if mime_type not in settings.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Unsupported file type: {mime_type or 'unknown'}"
        )

    file_content = await file.read()

    if len(file_content) > settings.MAX_IMAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds maximum {settings.MAX_IMAGE_SIZE / 1024 / 1024}MB"
        )

    if not storage.validate_image(file_content, mime_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or corrupted image file"
        )

    try:
        image = await image_crud.upload_image(
            store,
            storage,
            content=file_content,
            original_name=file.filename or "upload",
            mime_type=mime_type,
            alt=alt or None,
            description=description or None,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e)
        )
    except OSError as e:
        logger.error(f"Image upload failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        )

    if not image:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        )
    return image


@router.get("", response_model=List[Image])
async def list_images(
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """Get all images, most recently uploaded first."""
    return await image_crud.get_all_images(store)


@router.get("/serve")
async def serve_image(
    file: str = Query(..., min_length=1, description="Stored filename"),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Serve an image binary by its stored filename.

    **Permissions**: Anyone
    """
    if not storage.is_safe_filename(file):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid filename"
        )

    content = await storage.read_file(file)
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )

    return Response(
        content=content,
        media_type=media_type_for(file),
        headers={"Cache-Control": CACHE_CONTROL},
    )


@router.get("/stats", response_model=ImageStats)
async def get_image_stats(
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """Image count, total size and count per MIME type."""
    return await image_crud.get_image_stats(store)


@router.get("/{image_id}", response_model=Image)
async def get_image(
    image_id: str,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """Get image metadata."""
    image = await image_crud.get_image(store, image_id)
    if not image:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    return image


@router.put("/{image_id}", response_model=SuccessResponse)
async def update_image(
    image_id: str,
    image_data: ImageUpdate,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """Update alt text and description."""
    if not await image_crud.update_image_metadata(store, image_id, image_data):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    return SuccessResponse(message="Image updated successfully")


@router.delete("/{image_id}", response_model=SuccessResponse)
async def delete_image(
    image_id: str,
    store: ContentStore = Depends(get_store),
    storage: ImageStorage = Depends(get_image_storage),
    _: bool = Depends(require_admin),
):
    """Delete an image's metadata and its file."""
    if not await image_crud.delete_image(store, storage, image_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    return SuccessResponse(message="Image deleted successfully")
