"""Like toggles and the liked videos listing."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user
from clipnest.models.like import LikeSubject
from clipnest.models.schemas import LikedVideo, LikeToggleResult, VideoSummary
from clipnest.models.user import User
from clipnest.services.like_service import LikeService
from clipnest.utils.api_response import ApiResponse, api_response

router = APIRouter()


def _toggle(db: Session, subject_type: LikeSubject, raw_id: str, actor: User):
    is_liked, likes = LikeService(db).toggle(subject_type, raw_id, actor)
    message = "Liked successfully" if is_liked else "Unliked successfully"
    return api_response(status.HTTP_200_OK, LikeToggleResult(is_liked=is_liked, likes=likes), message)


@router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_video_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _toggle(db, LikeSubject.VIDEO, video_id, current_user)


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_comment_like(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _toggle(db, LikeSubject.COMMENT, comment_id, current_user)


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[LikeToggleResult])
async def toggle_tweet_like(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _toggle(db, LikeSubject.TWEET, tweet_id, current_user)


@router.get("/videos", response_model=ApiResponse[List[LikedVideo]])
async def get_liked_videos(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Published videos the caller has liked, most recent like first."""
    rows = LikeService(db).liked_videos(current_user)
    data = [
        LikedVideo(id=like.id, liked_at=like.created_at, video=VideoSummary.model_validate(video))
        for like, video in rows
    ]
    return api_response(status.HTTP_200_OK, data, "Liked videos fetched successfully")
