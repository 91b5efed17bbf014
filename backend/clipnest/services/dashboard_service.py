"""Channel owner dashboard aggregates."""

from typing import List

from sqlalchemy import func

from clipnest.models.comment import Comment
from clipnest.models.subscription import Subscription
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.models.video import Video


class DashboardService:
    """Read-only numbers for the signed-in channel."""

    def __init__(self, db):
        self.db = db

    def channel_stats(self, owner: User) -> dict:
        """
        Totals across the owner's content.

        Views and likes are summed from the video counters; comments are those
        left on the owner's videos by anyone.
        """
        total_videos, total_views, total_likes = self.db.query(
            func.count(Video.id),
            func.coalesce(func.sum(Video.views), 0),
            func.coalesce(func.sum(Video.likes), 0)
        ).filter(Video.owner_id == owner.id).one()

        total_subscribers = self.db.query(func.count(Subscription.id)).filter(
            Subscription.channel_id == owner.id
        ).scalar()

        total_tweets = self.db.query(func.count(Tweet.id)).filter(Tweet.owner_id == owner.id).scalar()

        total_comments = self.db.query(func.count(Comment.id)).join(
            Video, Comment.video_id == Video.id
        ).filter(Video.owner_id == owner.id).scalar()

        return {
            "total_videos": total_videos or 0,
            "total_views": int(total_views or 0),
            "total_likes": int(total_likes or 0),
            "total_subscribers": total_subscribers or 0,
            "total_tweets": total_tweets or 0,
            "total_comments": total_comments or 0,
        }

    def channel_videos(self, owner: User) -> List[Video]:
        """All of the owner's videos, drafts included, newest first."""
        return self.db.query(Video).filter(Video.owner_id == owner.id).order_by(Video.created_at.desc()).all()
