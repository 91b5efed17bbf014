"""Pydantic schemas for request/response validation."""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from clipnest.utils.api_response import CamelModel


# ============================================
# User Schemas
# ============================================

class OwnerSummary(CamelModel):
    """Public fields of a user embedded in other resources."""
    id: UUID
    username: str
    full_name: str
    avatar: str


class UserResponse(OwnerSummary):
    """Schema for user response. Credentials and refresh token are never included."""
    email: str
    cover_image: Optional[str] = ""
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserLogin(CamelModel):
    """Schema for user login. Either email or username identifies the account."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: str


class AccountUpdate(CamelModel):
    """Schema for updating account details."""
    full_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)


class PasswordChange(CamelModel):
    """Schema for password change."""
    old_password: str
    new_password: str = Field(..., min_length=8)


class RefreshRequest(CamelModel):
    """Refresh token supplied in the body when no cookie is present."""
    refresh_token: Optional[str] = None


class AuthTokens(CamelModel):
    """Login / refresh result."""
    user: Optional[UserResponse] = None
    access_token: str
    refresh_token: str


class ChannelProfile(CamelModel):
    """A user seen as a channel."""
    id: UUID
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: Optional[str] = ""
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


# ============================================
# Video Schemas
# ============================================

class VideoResponse(CamelModel):
    """Schema for video response."""
    id: UUID
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    video_file: str
    thumbnail: str
    title: str
    description: Optional[str] = ""
    duration: Optional[float] = 0
    views: int
    likes: int
    is_published: bool
    is_liked: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


class VideoSummary(CamelModel):
    """Compact video card used in likes and history listings."""
    id: UUID
    title: str
    thumbnail: str
    views: int
    duration: Optional[float] = 0
    created_at: datetime
    owner: Optional[OwnerSummary] = None


# ============================================
# Tweet Schemas
# ============================================

class TweetCreate(CamelModel):
    """Schema for creating or updating a tweet."""
    content: Optional[str] = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v):
        """Trim surrounding whitespace; emptiness is checked by the service."""
        return v.strip() if isinstance(v, str) else v


class TweetResponse(CamelModel):
    """Schema for tweet response."""
    id: UUID
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    content: str
    likes: int
    is_liked: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================
# Comment Schemas
# ============================================

class CommentCreate(TweetCreate):
    """Schema for creating or updating a comment."""


class CommentResponse(CamelModel):
    """Schema for comment response."""
    id: UUID
    video_id: UUID
    owner_id: UUID
    owner: Optional[OwnerSummary] = None
    content: str
    likes: int = 0
    is_liked: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================
# Like / Subscription Schemas
# ============================================

class LikeToggleResult(CamelModel):
    """State after a like toggle. likes is None for subjects without a counter."""
    is_liked: bool
    likes: Optional[int] = None


class LikedVideo(CamelModel):
    """A video the actor has liked."""
    id: UUID
    liked_at: datetime
    video: VideoSummary


class SubscriptionToggleResult(CamelModel):
    """State after a subscription toggle."""
    is_subscribed: bool
    channel_id: UUID
    subscribers_count: int


class SubscribedChannel(OwnerSummary):
    """A channel in a subscriber's list."""
    subscribed_at: datetime
    subscribers_count: int = 0


class SubscriberEntry(OwnerSummary):
    """A subscriber of a channel."""
    subscribed_at: datetime
    is_subscribed_back: bool = False


# ============================================
# History / Dashboard Schemas
# ============================================

class WatchHistoryEntry(CamelModel):
    """One entry of a user's watch history."""
    watched_at: datetime
    video: VideoSummary


class ChannelStats(CamelModel):
    """Aggregates for the channel dashboard."""
    total_videos: int
    total_views: int
    total_likes: int
    total_subscribers: int
    total_tweets: int
    total_comments: int

