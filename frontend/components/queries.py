"""
Cached reads over APIClient.

Each read is cached per access token and arguments for a short time; every
mutation goes through one of the helpers at the bottom, which clears the
caches whose data it changes. The client argument is underscored so
Streamlit does not try to hash it.
"""

import streamlit as st
from typing import Any, Optional

from components.api_client import APIClient

CACHE_TTL = 60


def token() -> Optional[str]:
    return st.session_state.get("token")


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def videos(_client: APIClient, access_token: Optional[str], page: int = 1, limit: int = 12,
           query: Optional[str] = None, user_id: Optional[str] = None,
           sort_by: str = "createdAt", sort_type: str = "desc") -> tuple[bool, Any]:
    return _client.list_videos(page=page, limit=limit, query=query, user_id=user_id,
                               sort_by=sort_by, sort_type=sort_type)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def comments(_client: APIClient, access_token: Optional[str], video_id: str, page: int = 1) -> tuple[bool, Any]:
    return _client.list_comments(video_id, page=page)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def tweets(_client: APIClient, access_token: Optional[str], page: int = 1) -> tuple[bool, Any]:
    return _client.list_tweets(page=page)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def user_tweets(_client: APIClient, access_token: Optional[str], user_id: str) -> tuple[bool, Any]:
    return _client.get_user_tweets(user_id)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def channel(_client: APIClient, access_token: Optional[str], username: str) -> tuple[bool, Any]:
    return _client.get_channel(username)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def subscribed_channels(_client: APIClient, access_token: Optional[str], user_id: str) -> tuple[bool, Any]:
    return _client.get_subscribed_channels(user_id)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def channel_stats(_client: APIClient, access_token: Optional[str]) -> tuple[bool, Any]:
    return _client.get_channel_stats()


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def channel_videos(_client: APIClient, access_token: Optional[str]) -> tuple[bool, Any]:
    return _client.get_channel_videos()


# ============================================
# Mutations
# ============================================

def _video_caches():
    videos.clear()
    channel_videos.clear()
    channel_stats.clear()


def publish_video(client: APIClient, *args) -> tuple[bool, Any]:
    result = client.publish_video(*args)
    _video_caches()
    return result


def update_video(client: APIClient, video_id: str, **changes) -> tuple[bool, Any]:
    result = client.update_video(video_id, **changes)
    _video_caches()
    return result


def delete_video(client: APIClient, video_id: str) -> tuple[bool, Any]:
    result = client.delete_video(video_id)
    _video_caches()
    comments.clear()
    return result


def toggle_publish(client: APIClient, video_id: str) -> tuple[bool, Any]:
    result = client.toggle_publish(video_id)
    _video_caches()
    return result


def toggle_like(client: APIClient, kind: str, subject_id: str) -> tuple[bool, Any]:
    result = client.toggle_like(kind, subject_id)
    if kind == "v":
        _video_caches()
    elif kind == "c":
        comments.clear()
    else:
        tweets.clear()
        user_tweets.clear()
    return result


def add_comment(client: APIClient, video_id: str, content: str) -> tuple[bool, Any]:
    result = client.add_comment(video_id, content)
    comments.clear()
    channel_stats.clear()
    return result


def delete_comment(client: APIClient, comment_id: str) -> tuple[bool, Any]:
    result = client.delete_comment(comment_id)
    comments.clear()
    channel_stats.clear()
    return result


def create_tweet(client: APIClient, content: str) -> tuple[bool, Any]:
    result = client.create_tweet(content)
    tweets.clear()
    user_tweets.clear()
    channel_stats.clear()
    return result


def update_tweet(client: APIClient, tweet_id: str, content: str) -> tuple[bool, Any]:
    result = client.update_tweet(tweet_id, content)
    tweets.clear()
    user_tweets.clear()
    return result


def delete_tweet(client: APIClient, tweet_id: str) -> tuple[bool, Any]:
    result = client.delete_tweet(tweet_id)
    tweets.clear()
    user_tweets.clear()
    channel_stats.clear()
    return result


def toggle_subscription(client: APIClient, channel_id: str) -> tuple[bool, Any]:
    result = client.toggle_subscription(channel_id)
    channel.clear()
    subscribed_channels.clear()
    channel_stats.clear()
    return result


def clear_all():
    """Drop every cached read, e.g. on login or logout."""
    st.cache_data.clear()
