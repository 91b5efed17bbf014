"""Video endpoints."""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user, get_optional_user
from clipnest.models.like import LikeSubject
from clipnest.models.schemas import VideoResponse
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.services.like_service import LikeService
from clipnest.services.media_service import MediaService, MediaServiceError, get_media_service
from clipnest.services.video_service import VideoService
from clipnest.utils.api_response import ApiResponse, Page, api_response
from clipnest.utils.validators import TITLE_MAX_LENGTH, require_text

logger = logging.getLogger(__name__)

router = APIRouter()

# Handlers that call the media host are plain functions so they run in the threadpool


def serialize_videos(db: Session, videos: List[Video], viewer: Optional[User]) -> List[VideoResponse]:
    """Schema instances with isLiked filled in for the viewer."""
    liked = LikeService(db).liked_ids(LikeSubject.VIDEO, [v.id for v in videos], viewer)
    items = []
    for video in videos:
        item = VideoResponse.model_validate(video)
        item.is_liked = video.id in liked
        items.append(item)
    return items


@router.get("", response_model=ApiResponse[Page[VideoResponse]])
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    query: Optional[str] = Query(None),
    sort_by: Optional[str] = Query("createdAt", alias="sortBy"),
    sort_type: Optional[str] = Query("desc", alias="sortType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    List published videos.

    Query params:
        query: case-insensitive substring of the title
        userId: only this channel's videos (ignored when malformed)
        sortBy / sortType: column and direction, defaults createdAt desc
        page / limit: limit is capped at 100
    """
    result = VideoService(db).list_videos(
        query=query,
        user_id=user_id,
        sort_by=sort_by,
        sort_type=sort_type,
        page=page,
        limit=limit,
        viewer=viewer
    )

    data = Page(
        items=serialize_videos(db, result.items, viewer),
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages
    )
    return api_response(status.HTTP_200_OK, data, "Videos fetched successfully")


@router.post("", response_model=ApiResponse[VideoResponse], status_code=status.HTTP_201_CREATED)
def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    """
    Upload a video and its thumbnail and publish it.

    The title is checked before anything is uploaded; if a later step fails
    the assets already on the media host are removed again.
    """
    require_text(title, "Title", TITLE_MAX_LENGTH)

    video_asset = media.store(video_file, "video file")
    thumbnail_asset = None
    try:
        thumbnail_asset = media.store(thumbnail, "thumbnail")
        video = VideoService(db).publish(current_user, title, description, video_asset, thumbnail_asset)
    except Exception:
        media.discard(video_asset, thumbnail_asset)
        raise

    return api_response(status.HTTP_201_CREATED, VideoResponse.model_validate(video), "Video published successfully")


@router.get("/{video_id}", response_model=ApiResponse[VideoResponse])
async def get_video(
    video_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Fetch one video. Signed-in viewers get it added to their watch history."""
    service = VideoService(db)
    video = service.get_for_viewer(video_id, viewer)

    if viewer is not None:
        service.record_watch(video, viewer)

    return api_response(status.HTTP_200_OK, serialize_videos(db, [video], viewer)[0], "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    """
    Edit title, description or thumbnail of an owned video.

    A replaced thumbnail is removed from the media host after the update.
    """
    if title is not None:
        require_text(title, "Title", TITLE_MAX_LENGTH)

    service = VideoService(db)
    old_thumbnail_id = service.get_owned(video_id, current_user.id).thumbnail_public_id

    thumbnail_asset = media.store(thumbnail, "thumbnail", required=False)
    try:
        video = service.update_video(video_id, current_user, title, description, thumbnail_asset)
    except Exception:
        media.discard(thumbnail_asset)
        raise

    if thumbnail_asset is not None:
        try:
            media.delete(old_thumbnail_id)
        except MediaServiceError as e:
            logger.warning("Old thumbnail of video %s not removed: %s", video.id, e)

    return api_response(status.HTTP_200_OK, VideoResponse.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[dict])
def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    deleted_id = VideoService(db).delete_video(video_id, current_user, media)
    return api_response(status.HTTP_200_OK, {"videoId": str(deleted_id)}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoResponse])
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    video = VideoService(db).toggle_publish(video_id, current_user)
    message = "Video published" if video.is_published else "Video unpublished"
    return api_response(status.HTTP_200_OK, VideoResponse.model_validate(video), message)


@router.patch("/views/{video_id}", response_model=ApiResponse[VideoResponse])
async def increment_views(video_id: str, db: Session = Depends(get_db)):
    """Add one view. Public so that anonymous plays are counted."""
    video = VideoService(db).increment_views(video_id)
    return api_response(status.HTTP_200_OK, VideoResponse.model_validate(video), "View recorded")
