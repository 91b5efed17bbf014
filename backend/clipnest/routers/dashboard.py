"""Channel dashboard endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user
from clipnest.models.schemas import ChannelStats, VideoResponse
from clipnest.models.user import User
from clipnest.routers.videos import serialize_videos
from clipnest.services.dashboard_service import DashboardService
from clipnest.utils.api_response import ApiResponse, api_response

router = APIRouter()


@router.get("/stats", response_model=ApiResponse[ChannelStats])
async def get_channel_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals for the caller's own channel."""
    stats = DashboardService(db).channel_stats(current_user)
    return api_response(status.HTTP_200_OK, ChannelStats.model_validate(stats), "Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse[List[VideoResponse]])
async def get_channel_videos(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All of the caller's videos, unpublished ones included."""
    videos = DashboardService(db).channel_videos(current_user)
    return api_response(status.HTTP_200_OK, serialize_videos(db, videos, current_user), "Channel videos fetched successfully")
