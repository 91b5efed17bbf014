"""Tweet business logic."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete

from clipnest.models.like import Like, LikeSubject
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.services.crud import OwnedResourceService, PageResult
from clipnest.utils.validators import parse_object_id, require_text


class TweetService(OwnedResourceService):
    """Tweets are plain text posts with a denormalised like counter."""

    model = Tweet
    kind = "Tweet"
    sort_columns = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "likes": "likes",
    }

    def list_tweets(self, page: int = 1, limit: int = 20) -> PageResult:
        """Newest first."""
        return self.paginate(self.db.query(Tweet), page=page, limit=limit)

    def user_tweets(self, raw_user_id) -> List[Tweet]:
        """All tweets by one user, newest first."""
        user_id = parse_object_id(raw_user_id, "user")
        return self.db.query(Tweet).filter(Tweet.owner_id == user_id).order_by(Tweet.created_at.desc()).all()

    def create_tweet(self, owner: User, content: Optional[str]) -> Tweet:
        return self.create(owner.id, content=require_text(content, "Content"), likes=0)

    def update_tweet(self, raw_id, owner: User, content: Optional[str]) -> Tweet:
        # Validate the id before the body so a bad id is reported first
        self.parse_id(raw_id)
        return self.update_owned(raw_id, owner.id, {"content": require_text(content, "Content")})

    def delete_tweet(self, raw_id, owner: User) -> UUID:
        return self.delete_owned(raw_id, owner.id)

    def delete_dependents(self, resource_id: UUID):
        self.db.execute(
            delete(Like)
            .where(Like.subject_type == LikeSubject.TWEET, Like.subject_id == resource_id)
            .execution_options(synchronize_session=False)
        )
