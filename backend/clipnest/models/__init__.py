"""Database models."""

from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.models.tweet import Tweet
from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.subscription import Subscription
from clipnest.models.watch_history import WatchHistory

__all__ = ["User", "Video", "Tweet", "Comment", "Like", "LikeSubject", "Subscription", "WatchHistory"]
