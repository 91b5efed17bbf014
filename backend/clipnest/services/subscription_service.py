"""Channel subscriptions."""

from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import func

from clipnest.models.subscription import Subscription
from clipnest.models.user import User
from clipnest.services.toggle import toggle_row
from clipnest.utils.api_error import ApiError
from clipnest.utils.validators import parse_object_id


class SubscriptionService:
    """Subscribe / unsubscribe and the two directions of the follower graph."""

    def __init__(self, db):
        self.db = db

    def _existing_user(self, raw_id, kind: str) -> User:
        user_id = parse_object_id(raw_id, kind)
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ApiError(status.HTTP_404_NOT_FOUND, f"{kind.capitalize()} not found")
        return user

    def toggle(self, raw_channel_id, actor: User) -> Tuple[bool, UUID, int]:
        """
        Flip the actor's subscription to a channel.

        Returns:
            Tuple of (is_subscribed, channel_id, subscribers_count)
        """
        channel_id = parse_object_id(raw_channel_id, "channel")
        if channel_id == actor.id:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "You cannot subscribe to your own channel")

        channel = self._existing_user(channel_id, "channel")
        is_subscribed = toggle_row(
            self.db,
            Subscription,
            {"subscriber_id": actor.id, "channel_id": channel.id}
        )
        return is_subscribed, channel.id, self.subscriber_count(channel.id)

    def subscriber_count(self, channel_id: UUID) -> int:
        return self.db.query(func.count(Subscription.id)).filter(
            Subscription.channel_id == channel_id
        ).scalar() or 0

    def subscribed_to_count(self, subscriber_id: UUID) -> int:
        return self.db.query(func.count(Subscription.id)).filter(
            Subscription.subscriber_id == subscriber_id
        ).scalar() or 0

    def is_subscribed(self, channel_id: UUID, actor: Optional[User]) -> bool:
        if actor is None:
            return False
        return self.db.query(Subscription.id).filter(
            Subscription.subscriber_id == actor.id,
            Subscription.channel_id == channel_id
        ).first() is not None

    def subscribers(self, raw_channel_id) -> List[dict]:
        """Users subscribed to a channel, with whether the channel follows them back."""
        channel = self._existing_user(raw_channel_id, "channel")
        rows = self.db.query(Subscription).filter(
            Subscription.channel_id == channel.id
        ).order_by(Subscription.created_at.desc()).all()

        followed_back = {
            row[0] for row in self.db.query(Subscription.channel_id).filter(
                Subscription.subscriber_id == channel.id
            ).all()
        }

        return [
            {
                "id": sub.subscriber.id,
                "username": sub.subscriber.username,
                "full_name": sub.subscriber.full_name,
                "avatar": sub.subscriber.avatar,
                "subscribed_at": sub.created_at,
                "is_subscribed_back": sub.subscriber_id in followed_back,
            }
            for sub in rows
        ]

    def subscribed_channels(self, raw_subscriber_id) -> List[dict]:
        """Channels a user follows; an empty list when there are none."""
        subscriber = self._existing_user(raw_subscriber_id, "subscriber")
        rows = self.db.query(Subscription).filter(
            Subscription.subscriber_id == subscriber.id
        ).order_by(Subscription.created_at.desc()).all()

        counts = dict(
            self.db.query(Subscription.channel_id, func.count(Subscription.id)).filter(
                Subscription.channel_id.in_([sub.channel_id for sub in rows])
            ).group_by(Subscription.channel_id).all()
        ) if rows else {}

        return [
            {
                "id": sub.channel.id,
                "username": sub.channel.username,
                "full_name": sub.channel.full_name,
                "avatar": sub.channel.avatar,
                "subscribed_at": sub.created_at,
                "subscribers_count": counts.get(sub.channel_id, 0),
            }
            for sub in rows
        ]
