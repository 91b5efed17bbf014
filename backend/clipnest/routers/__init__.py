"""API routers."""

from clipnest.routers import users, videos, tweets, comments, likes, subscriptions, dashboard, health

__all__ = ["users", "videos", "tweets", "comments", "likes", "subscriptions", "dashboard", "health"]
