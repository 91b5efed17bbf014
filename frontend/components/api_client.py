"""API client for backend communication."""

import requests
import streamlit as st
from typing import Optional, Dict, Any
import os

API_PREFIX = "/api/v1"


class APIClient:
    """
    Client for communicating with the FastAPI backend.

    Every call returns ``(success, data or error_message)``; the response
    envelope is unwrapped here so pages only see the payload.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = 30):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the API (default: from environment or localhost)
            timeout: Seconds before a request is abandoned
        """
        self.base_url = base_url or os.getenv("API_BASE_URL", "http://localhost:8000")
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        """
        Get request headers with authorization token if available.

        Content-Type is left to requests so multipart bodies get their boundary.
        """
        headers = {}

        if "token" in st.session_state:
            headers["Authorization"] = f"Bearer {st.session_state.token}"

        return headers

    def _clear_session(self):
        """Forget the rejected access token; the refresh token may still renew it."""
        st.session_state.pop("token", None)

    def _request(self, method: str, path: str, default_error: str = "Request failed", **kwargs) -> tuple[bool, Any]:
        """
        Send a request and unwrap the envelope.

        Args:
            method: HTTP method
            path: Path below /api/v1 (or absolute, starting with /health)
            default_error: Message used when the body carries none

        Returns:
            Tuple of (success, data or error_message)
        """
        url = f"{self.base_url}{path if path.startswith('/health') else API_PREFIX + path}"

        try:
            response = requests.request(method, url, headers=self._get_headers(), timeout=self.timeout, **kwargs)
        except requests.exceptions.ConnectionError:
            return False, "Cannot connect to server. Make sure the backend is running."
        except requests.exceptions.RequestException as e:
            return False, f"Error: {str(e)}"

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code == 401 and "token" in st.session_state:
            self._clear_session()

        if response.ok and body.get("success", True):
            return True, body.get("data")

        return False, body.get("message") or default_error

    # ============================================
    # Users
    # ============================================

    def register(self, full_name: str, email: str, username: str, password: str,
                 avatar, cover_image=None) -> tuple[bool, Any]:
        """
        Register a new user.

        Args:
            avatar: Uploaded file (name, bytes, mime) tuple or file-like object
            cover_image: Optional cover image in the same form

        Returns:
            Tuple of (success, user or error_message)
        """
        files = {"avatar": avatar}
        if cover_image is not None:
            files["coverImage"] = cover_image

        return self._request(
            "POST", "/users/register", "Registration failed",
            data={"fullName": full_name, "email": email, "username": username, "password": password},
            files=files
        )

    def login(self, identifier: str, password: str) -> tuple[bool, Any]:
        """
        Login with username or email and password.

        Returns:
            Tuple of (success, {user, accessToken, refreshToken} or error_message)
        """
        field = "email" if "@" in identifier else "username"
        return self._request("POST", "/users/login", "Login failed", json={field: identifier, "password": password})

    def logout(self) -> tuple[bool, Any]:
        return self._request("POST", "/users/logout", "Logout failed")

    def refresh(self) -> tuple[bool, Any]:
        """Rotate tokens using the refresh token kept in session state."""
        token = st.session_state.get("refresh_token")
        if not token:
            return False, "No refresh token"

        success, result = self._request("POST", "/users/refresh-token", "Session expired", json={"refreshToken": token})
        if success:
            st.session_state.token = result["accessToken"]
            st.session_state.refresh_token = result["refreshToken"]
        return success, result

    def get_current_user(self) -> tuple[bool, Any]:
        return self._request("GET", "/users/current-user", "Failed to get user information")

    def change_password(self, old_password: str, new_password: str) -> tuple[bool, Any]:
        return self._request(
            "POST", "/users/change-password", "Failed to change password",
            json={"oldPassword": old_password, "newPassword": new_password}
        )

    def update_account(self, full_name: Optional[str] = None, email: Optional[str] = None) -> tuple[bool, Any]:
        payload = {}
        if full_name:
            payload["fullName"] = full_name
        if email:
            payload["email"] = email
        return self._request("PATCH", "/users/update-account", "Failed to update account", json=payload)

    def update_avatar(self, avatar) -> tuple[bool, Any]:
        return self._request("PATCH", "/users/avatar", "Failed to update avatar", files={"avatar": avatar})

    def update_cover_image(self, cover_image) -> tuple[bool, Any]:
        return self._request("PATCH", "/users/cover-image", "Failed to update cover image",
                             files={"coverImage": cover_image})

    def get_channel(self, username: str) -> tuple[bool, Any]:
        return self._request("GET", f"/users/c/{username}", "Channel not found")

    def get_watch_history(self) -> tuple[bool, Any]:
        return self._request("GET", "/users/history", "Failed to load watch history")

    # ============================================
    # Videos
    # ============================================

    def list_videos(self, page: int = 1, limit: int = 12, query: Optional[str] = None,
                    user_id: Optional[str] = None, sort_by: str = "createdAt",
                    sort_type: str = "desc") -> tuple[bool, Any]:
        """
        List videos.

        Returns:
            Tuple of (success, {items, total, page, limit, totalPages} or error_message)
        """
        params = {"page": page, "limit": limit, "sortBy": sort_by, "sortType": sort_type}
        if query:
            params["query"] = query
        if user_id:
            params["userId"] = user_id
        return self._request("GET", "/videos", "Failed to load videos", params=params)

    def publish_video(self, title: str, description: str, video_file, thumbnail) -> tuple[bool, Any]:
        return self._request(
            "POST", "/videos", "Failed to publish video",
            data={"title": title, "description": description},
            files={"videoFile": video_file, "thumbnail": thumbnail}
        )

    def get_video(self, video_id: str) -> tuple[bool, Any]:
        return self._request("GET", f"/videos/{video_id}", "Video not found")

    def update_video(self, video_id: str, title: Optional[str] = None, description: Optional[str] = None,
                     thumbnail=None) -> tuple[bool, Any]:
        data = {}
        if title is not None:
            data["title"] = title
        if description is not None:
            data["description"] = description
        files = {"thumbnail": thumbnail} if thumbnail is not None else None
        return self._request("PATCH", f"/videos/{video_id}", "Failed to update video", data=data, files=files)

    def delete_video(self, video_id: str) -> tuple[bool, Any]:
        return self._request("DELETE", f"/videos/{video_id}", "Failed to delete video")

    def toggle_publish(self, video_id: str) -> tuple[bool, Any]:
        return self._request("PATCH", f"/videos/toggle/publish/{video_id}", "Failed to change publish status")

    def add_view(self, video_id: str) -> tuple[bool, Any]:
        return self._request("PATCH", f"/videos/views/{video_id}", "Failed to record view")

    # ============================================
    # Tweets
    # ============================================

    def list_tweets(self, page: int = 1, limit: int = 20) -> tuple[bool, Any]:
        return self._request("GET", "/tweets", "Failed to load tweets", params={"page": page, "limit": limit})

    def create_tweet(self, content: str) -> tuple[bool, Any]:
        return self._request("POST", "/tweets", "Failed to post tweet", json={"content": content})

    def get_user_tweets(self, user_id: str) -> tuple[bool, Any]:
        return self._request("GET", f"/tweets/user/{user_id}", "Failed to load tweets")

    def update_tweet(self, tweet_id: str, content: str) -> tuple[bool, Any]:
        return self._request("PATCH", f"/tweets/{tweet_id}", "Failed to update tweet", json={"content": content})

    def delete_tweet(self, tweet_id: str) -> tuple[bool, Any]:
        return self._request("DELETE", f"/tweets/{tweet_id}", "Failed to delete tweet")

    # ============================================
    # Comments
    # ============================================

    def list_comments(self, video_id: str, page: int = 1, limit: int = 10) -> tuple[bool, Any]:
        return self._request("GET", f"/comments/{video_id}", "Failed to load comments",
                             params={"page": page, "limit": limit})

    def add_comment(self, video_id: str, content: str) -> tuple[bool, Any]:
        return self._request("POST", f"/comments/{video_id}", "Failed to add comment", json={"content": content})

    def update_comment(self, comment_id: str, content: str) -> tuple[bool, Any]:
        return self._request("PATCH", f"/comments/c/{comment_id}", "Failed to update comment",
                             json={"content": content})

    def delete_comment(self, comment_id: str) -> tuple[bool, Any]:
        return self._request("DELETE", f"/comments/c/{comment_id}", "Failed to delete comment")

    # ============================================
    # Likes & Subscriptions
    # ============================================

    def toggle_like(self, kind: str, subject_id: str) -> tuple[bool, Any]:
        """
        Toggle a like.

        Args:
            kind: "v" (video), "c" (comment) or "t" (tweet)
        """
        return self._request("POST", f"/likes/toggle/{kind}/{subject_id}", "Failed to toggle like")

    def get_liked_videos(self) -> tuple[bool, Any]:
        return self._request("GET", "/likes/videos", "Failed to load liked videos")

    def toggle_subscription(self, channel_id: str) -> tuple[bool, Any]:
        return self._request("POST", f"/subscriptions/c/{channel_id}", "Failed to toggle subscription")

    def get_subscribers(self, channel_id: str) -> tuple[bool, Any]:
        return self._request("GET", f"/subscriptions/c/{channel_id}", "Failed to load subscribers")

    def get_subscribed_channels(self, subscriber_id: str) -> tuple[bool, Any]:
        return self._request("GET", f"/subscriptions/u/{subscriber_id}", "Failed to load subscriptions")

    # ============================================
    # Dashboard & Health
    # ============================================

    def get_channel_stats(self) -> tuple[bool, Any]:
        return self._request("GET", "/dashboard/stats", "Failed to load channel stats")

    def get_channel_videos(self) -> tuple[bool, Any]:
        return self._request("GET", "/dashboard/videos", "Failed to load channel videos")

    def health_check(self) -> bool:
        """
        Check if the API is healthy.

        Returns:
            True if API is accessible, False otherwise
        """
        success, _ = self._request("GET", "/health")
        return success
