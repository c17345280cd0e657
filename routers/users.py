# routers/users.py
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from minio.error import MinioException
from starlette.concurrency import run_in_threadpool
from urllib3.exceptions import HTTPError

from core.config import settings
from core.dependencies import get_user_directory
from core.errors import StorageFailure, ValidationFailure
from core.security import get_current_user
from models.user import User
from schemas.user import NicknameRead, PicturePathRead, ProfileRead, ProfileUpdate
from services.user_directory import UserDirectory
from utils.storage import delete_picture, upload_picture
from utils.user_helpers import to_profile_read

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger("uvicorn.error")


@router.get(
    "/me",
    response_model=ProfileRead,
    summary="Get my profile",
)
async def read_my_profile(current_user: User = Depends(get_current_user)) -> ProfileRead:
    return to_profile_read(current_user)


@router.put(
    "/me",
    response_model=ProfileRead,
    summary="Update my profile",
)
async def update_my_profile(
    payload: ProfileUpdate,
    users: UserDirectory = Depends(get_user_directory),
    current_user: User = Depends(get_current_user),
) -> ProfileRead:
    user = await users.update_profile(current_user, payload)
    return to_profile_read(user)


@router.post(
    "/me/picture",
    response_model=PicturePathRead,
    summary="Upload my profile picture",
)
async def upload_my_picture(
    file: UploadFile = File(..., description="Profile picture"),
    users: UserDirectory = Depends(get_user_directory),
    current_user: User = Depends(get_current_user),
) -> PicturePathRead:
    data = await file.read()
    if not data:
        raise ValidationFailure("Empty file")
    if len(data) > settings.MAX_PICTURE_BYTES:
        raise ValidationFailure(f"Picture is larger than {settings.MAX_PICTURE_BYTES} bytes")

    try:
        s3_key = await run_in_threadpool(upload_picture, data, current_user.id)
    except ValueError as exc:
        raise ValidationFailure(str(exc))
    except (MinioException, HTTPError) as exc:
        logger.exception("Picture upload for %s failed", current_user.id)
        raise StorageFailure("Picture upload failed") from exc

    previous_key = current_user.profile_picture_path
    user = await users.update_picture_path(current_user, s3_key)

    # the new picture is already saved; a stale object is only logged
    if previous_key and previous_key != s3_key:
        try:
            await run_in_threadpool(delete_picture, previous_key)
        except (MinioException, HTTPError):
            logger.warning("Could not delete old picture %s of %s", previous_key, current_user.id)

    return PicturePathRead(profile_picture_path=user.profile_picture_path)


@router.get(
    "/{user_id}/profile",
    response_model=ProfileRead,
    summary="Get another user's profile",
)
async def read_profile(
    user_id: str,
    users: UserDirectory = Depends(get_user_directory),
    current_user: User = Depends(get_current_user),
) -> ProfileRead:
    return to_profile_read(await users.get_user_by_id(user_id))


@router.get(
    "/{user_id}/nickname",
    response_model=NicknameRead,
    summary="Get another user's nickname",
)
async def read_nickname(
    user_id: str,
    users: UserDirectory = Depends(get_user_directory),
    current_user: User = Depends(get_current_user),
) -> NicknameRead:
    return NicknameRead(nickname=await users.get_user_nickname_by_id(user_id))


@router.get(
    "/{user_id}/picture-path",
    response_model=PicturePathRead,
    summary="Get the storage key of another user's profile picture",
)
async def read_picture_path(
    user_id: str,
    users: UserDirectory = Depends(get_user_directory),
    current_user: User = Depends(get_current_user),
) -> PicturePathRead:
    path = await users.get_profile_picture_path_by_user_id(user_id)
    return PicturePathRead(profile_picture_path=path)
