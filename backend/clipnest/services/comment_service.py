"""Comment business logic."""

from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete

from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.services.crud import OwnedResourceService, PageResult
from clipnest.services.video_service import visible_to
from clipnest.utils.api_error import ApiError
from clipnest.utils.validators import parse_object_id, require_text


class CommentService(OwnedResourceService):
    """Comments hang off a video and are owned by their author."""

    model = Comment
    kind = "Comment"

    def _visible_video_id(self, raw_video_id, viewer: Optional[User]) -> UUID:
        """Parse a video id; drafts count as missing for everyone but their owner."""
        video_id = parse_object_id(raw_video_id, "video")
        if not self.db.query(Video.id).filter(Video.id == video_id, visible_to(viewer)).first():
            raise ApiError(status.HTTP_404_NOT_FOUND, "Video not found")
        return video_id

    def list_for_video(self, raw_video_id, viewer: Optional[User] = None, page: int = 1, limit: int = 10) -> PageResult:
        """Comments on a video, newest first."""
        video_id = self._visible_video_id(raw_video_id, viewer)
        query = self.db.query(Comment).filter(Comment.video_id == video_id)
        return self.paginate(query, page=page, limit=limit)

    def add_comment(self, raw_video_id, owner: User, content: Optional[str]) -> Comment:
        video_id = parse_object_id(raw_video_id, "video")
        text = require_text(content, "Content")
        self._visible_video_id(video_id, owner)
        return self.create(owner.id, video_id=video_id, content=text)

    def update_comment(self, raw_id, owner: User, content: Optional[str]) -> Comment:
        self.parse_id(raw_id)
        return self.update_owned(raw_id, owner.id, {"content": require_text(content, "Content")})

    def delete_comment(self, raw_id, owner: User) -> UUID:
        return self.delete_owned(raw_id, owner.id)

    def delete_dependents(self, resource_id: UUID):
        self.db.execute(
            delete(Like)
            .where(Like.subject_type == LikeSubject.COMMENT, Like.subject_id == resource_id)
            .execution_options(synchronize_session=False)
        )
