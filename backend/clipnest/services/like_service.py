"""Likes on videos, comments and tweets."""

from typing import Iterable, List, Optional, Set, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import func

from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.services.toggle import counter_adjuster, toggle_row
from clipnest.services.video_service import visible_to
from clipnest.utils.api_error import ApiError
from clipnest.utils.validators import parse_object_id

# Subject kind -> (model, kind label, carries a likes counter)
SUBJECTS = {
    LikeSubject.VIDEO: (Video, "Video", True),
    LikeSubject.COMMENT: (Comment, "Comment", False),
    LikeSubject.TWEET: (Tweet, "Tweet", True),
}


class LikeService:
    """Toggle and query like state for one actor."""

    def __init__(self, db):
        self.db = db

    def toggle(self, subject_type: LikeSubject, raw_id, actor: User) -> Tuple[bool, int]:
        """
        Flip the actor's like on a subject.

        Args:
            subject_type: Kind of entity being liked
            raw_id: Identifier from the path
            actor: Authenticated user

        Returns:
            Tuple of (is_liked, like count after the toggle)
        """
        model, kind, has_counter = SUBJECTS[subject_type]
        subject_id = parse_object_id(raw_id, kind.lower())

        subject = self.db.query(model.id).filter(model.id == subject_id)
        # Drafts, and comments on them, only exist for the video owner
        if subject_type == LikeSubject.VIDEO:
            subject = subject.filter(visible_to(actor))
        elif subject_type == LikeSubject.COMMENT:
            subject = subject.join(Video, Comment.video_id == Video.id).filter(visible_to(actor))

        if not subject.first():
            raise ApiError(status.HTTP_404_NOT_FOUND, f"{kind} not found")

        on_change = counter_adjuster(self.db, model, subject_id) if has_counter else None
        is_liked = toggle_row(
            self.db,
            Like,
            {"subject_type": subject_type, "subject_id": subject_id, "liked_by_id": actor.id},
            on_change=on_change
        )

        if has_counter:
            self.db.expire_all()
            likes = self.db.query(model.likes).filter(model.id == subject_id).scalar()
        else:
            likes = self.count(subject_type, subject_id)

        return is_liked, likes

    def count(self, subject_type: LikeSubject, subject_id: UUID) -> int:
        return self.db.query(func.count(Like.id)).filter(
            Like.subject_type == subject_type,
            Like.subject_id == subject_id
        ).scalar() or 0

    def is_liked(self, subject_type: LikeSubject, subject_id: UUID, actor: Optional[User]) -> bool:
        if actor is None:
            return False
        return self.db.query(Like.id).filter(
            Like.subject_type == subject_type,
            Like.subject_id == subject_id,
            Like.liked_by_id == actor.id
        ).first() is not None

    def liked_ids(self, subject_type: LikeSubject, subject_ids: Iterable[UUID], actor: Optional[User]) -> Set[UUID]:
        """Subset of subject_ids the actor has liked, in one query."""
        ids = list(subject_ids)
        if actor is None or not ids:
            return set()
        rows = self.db.query(Like.subject_id).filter(
            Like.subject_type == subject_type,
            Like.subject_id.in_(ids),
            Like.liked_by_id == actor.id
        ).all()
        return {row[0] for row in rows}

    def counts(self, subject_type: LikeSubject, subject_ids: Iterable[UUID]) -> dict:
        """Like count per subject id for subjects without a counter column."""
        ids = list(subject_ids)
        if not ids:
            return {}
        rows = self.db.query(Like.subject_id, func.count(Like.id)).filter(
            Like.subject_type == subject_type,
            Like.subject_id.in_(ids)
        ).group_by(Like.subject_id).all()
        return {subject_id: total for subject_id, total in rows}

    def liked_videos(self, actor: User) -> List[Tuple[Like, Video]]:
        """Published videos the actor liked, most recent like first."""
        return self.db.query(Like, Video).join(Video, Like.subject_id == Video.id).filter(
            Like.subject_type == LikeSubject.VIDEO,
            Like.liked_by_id == actor.id,
            Video.is_published.is_(True)
        ).order_by(Like.created_at.desc()).all()
