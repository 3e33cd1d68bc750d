"""
Users router: profile lookup, profile picture upload and username changes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from photo_feed.database import get_db
from photo_feed.exceptions import ConflictError, NotFoundError, ValidationError
from photo_feed.schemas.user import (
    ProfilePicResponse,
    RenameRequest,
    RenameResponse,
    UserResponse,
)
from photo_feed.services.file_store import PROFILE_PIC_FIELD, get_file_store
from photo_feed.services.identity import IdentityService
from photo_feed.utils.prometheus_metrics import user_rename_total

router = APIRouter(prefix="/api", tags=["Users"])


@router.get(
    "/users/{username}",
    response_model=UserResponse,
    summary="Get a user's public profile",
)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await IdentityService(db).get_profile(username)
    return UserResponse.model_validate(user)


@router.post(
    "/profile/upload",
    response_model=ProfilePicResponse,
    summary="Upload a profile picture",
)
async def upload_profile_picture(
    profile_pic: Optional[UploadFile] = File(None, alias=PROFILE_PIC_FIELD),
    username: str = Form(""),
    db: AsyncSession = Depends(get_db),
) -> ProfilePicResponse:
    """
    Store the image and point the user's `profilePic` at it.

    - **profilePic**: image file (required)
    - **username**: account to update; an unknown username is not an error
    """
    store = get_file_store()
    file_url = await store.save_upload(PROFILE_PIC_FIELD, profile_pic)
    if not file_url:
        raise ValidationError("No file uploaded")

    try:
        await IdentityService(db).update_profile_picture(username, file_url)
        await db.commit()
    except Exception:
        await store.delete(file_url)
        raise
    return ProfilePicResponse(message="Profile picture updated", profile_pic_url=file_url)


@router.post(
    "/users/update",
    response_model=RenameResponse,
    summary="Change a username",
)
async def rename_user(
    data: RenameRequest,
    db: AsyncSession = Depends(get_db),
) -> RenameResponse:
    """
    Change `oldUsername` to `newUsername` and re-attribute that user's photos.
    Sending the same name twice is a successful no-op.
    """
    try:
        user, renamed = await IdentityService(db).rename_user(data.old_username, data.new_username)
        await db.commit()
    except ConflictError:
        user_rename_total.labels(result="conflict").inc()
        raise
    except NotFoundError:
        user_rename_total.labels(result="not_found").inc()
        raise

    user_rename_total.labels(result="renamed" if renamed else "noop").inc()
    return RenameResponse(
        message="Username changed",
        user=UserResponse.model_validate(user) if user else None,
    )
