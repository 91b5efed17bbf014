"""Subscription endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user
from clipnest.models.schemas import SubscribedChannel, SubscriberEntry, SubscriptionToggleResult
from clipnest.models.user import User
from clipnest.services.subscription_service import SubscriptionService
from clipnest.utils.api_response import ApiResponse, api_response

router = APIRouter()


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggleResult])
async def toggle_subscription(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Subscribe to a channel, or unsubscribe when already subscribed."""
    is_subscribed, channel, count = SubscriptionService(db).toggle(channel_id, current_user)
    data = SubscriptionToggleResult(is_subscribed=is_subscribed, channel_id=channel, subscribers_count=count)
    message = "Subscribed successfully" if is_subscribed else "Unsubscribed successfully"
    return api_response(status.HTTP_200_OK, data, message)


@router.get("/c/{channel_id}", response_model=ApiResponse[List[SubscriberEntry]])
async def get_channel_subscribers(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    rows = SubscriptionService(db).subscribers(channel_id)
    return api_response(
        status.HTTP_200_OK,
        [SubscriberEntry.model_validate(row) for row in rows],
        "Subscribers fetched successfully"
    )


@router.get("/u/{subscriber_id}", response_model=ApiResponse[List[SubscribedChannel]])
async def get_subscribed_channels(
    subscriber_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Channels the user follows. An empty list is a normal result."""
    rows = SubscriptionService(db).subscribed_channels(subscriber_id)
    return api_response(
        status.HTTP_200_OK,
        [SubscribedChannel.model_validate(row) for row in rows],
        "Subscribed channels fetched successfully"
    )
