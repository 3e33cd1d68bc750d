"""
Photos router: feed, upload, edit, delete and likes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from photo_feed.database import get_db
from photo_feed.exceptions import NotFoundError
from photo_feed.schemas.common import MessageResponse
from photo_feed.schemas.photo import (
    LikeRequest,
    LikeResponse,
    PhotoResponse,
    PhotoUpdate,
    PhotoUploadResponse,
)
from photo_feed.services.file_store import PHOTO_FIELD, get_file_store
from photo_feed.services.photo import PhotoService
from photo_feed.utils.prometheus_metrics import like_toggle_total, photo_upload_total

router = APIRouter(prefix="/api/photos", tags=["Photos"])


@router.get(
    "",
    response_model=List[PhotoResponse],
    summary="List all photos",
)
async def list_photos(
    db: AsyncSession = Depends(get_db),
) -> List[PhotoResponse]:
    """
    All photos, newest first. Each carries decoded `tags` and `likes`,
    the usernames that liked it.
    """
    return await PhotoService(db).list_photos()


@router.post(
    "/upload",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a new photo",
)
async def upload_photo(
    photo: Optional[UploadFile] = File(None, description="Photo file to upload"),
    uploader: str = Form(""),
    title: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="Comma-separated tags"),
    description: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
) -> PhotoUploadResponse:
    """
    Upload a photo.

    - **photo**: image file (required)
    - **uploader**: uploader's username
    - **tags**: e.g. `"sea, sunset"` → `["sea", "sunset"]`
    """
    store = get_file_store()
    stored_url = await store.save_upload(PHOTO_FIELD, photo)
    try:
        created = await PhotoService(db).upload_photo(
            uploader=uploader,
            title=title,
            tags_csv=tags,
            description=description,
            stored_file_url=stored_url,
        )
        await db.commit()
    except Exception:
        photo_upload_total.labels(result="failure").inc()
        # DB 기록 실패 시 저장된 파일 정리
        if stored_url:
            await store.delete(stored_url)
        raise

    photo_upload_total.labels(result="success").inc()
    return PhotoUploadResponse(message="Photo uploaded", photo_id=created.id)


@router.post(
    "/like",
    response_model=LikeResponse,
    summary="Toggle a like",
)
async def toggle_like(
    data: LikeRequest,
    db: AsyncSession = Depends(get_db),
) -> LikeResponse:
    """
    Like the photo if `username` has not liked it yet, otherwise remove the like.
    """
    try:
        liked = await PhotoService(db).toggle_like(data.photo_id, data.username)
        await db.commit()
    except NotFoundError:
        like_toggle_total.labels(result="not_found").inc()
        raise

    like_toggle_total.labels(result="liked" if liked else "unliked").inc()
    return LikeResponse(message="Liked" if liked else "Unliked", liked=liked)


@router.delete(
    "/{photo_id}",
    response_model=MessageResponse,
    summary="Delete a photo",
)
async def delete_photo(
    photo_id: int,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Delete a photo, its likes and its stored file. Unknown ids succeed.
    """
    url = await PhotoService(db).delete_photo(photo_id)
    await db.commit()
    if url:
        await get_file_store().delete(url)
    return MessageResponse(message="Photo deleted")


@router.put(
    "/{photo_id}",
    response_model=MessageResponse,
    summary="Edit photo metadata",
)
async def update_photo(
    photo_id: int,
    update_data: PhotoUpdate,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Overwrite `title`, `tags` (comma-separated) and `description`. Unknown ids succeed.
    """
    await PhotoService(db).update_photo(photo_id, update_data)
    await db.commit()
    return MessageResponse(message="Photo updated")
