"""Video business logic."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import status
from sqlalchemy import delete, not_, or_, select, update

from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.models.watch_history import WatchHistory
from clipnest.services.crud import OwnedResourceService, PageResult
from clipnest.services.media_service import MediaAsset, MediaService, MediaServiceError
from clipnest.utils.api_error import ApiError
from clipnest.utils.validators import TITLE_MAX_LENGTH, is_valid_object_id, require_text

logger = logging.getLogger(__name__)


def visible_to(viewer: Optional[User]):
    """Filter for videos the viewer may see: published ones, plus their own drafts."""
    if viewer is None:
        return Video.is_published.is_(True)
    return or_(Video.is_published.is_(True), Video.owner_id == viewer.id)


class VideoService(OwnedResourceService):
    """Videos: publishing, listing, ownership-scoped edits and view counting."""

    model = Video
    kind = "Video"
    sort_columns = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "views": "views",
        "likes": "likes",
        "title": "title",
        "duration": "duration",
    }

    def list_videos(
        self,
        query: Optional[str] = None,
        user_id: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_type: str = "desc",
        page: int = 1,
        limit: int = 10,
        viewer: Optional[User] = None
    ) -> PageResult:
        """
        Filter, sort and paginate videos.

        Unpublished videos are only listed for their owner, and only when the
        owner filters on their own channel.
        """
        q = self.db.query(Video)

        if query:
            q = q.filter(Video.title.icontains(query.strip(), autoescape=True))

        owner_id = UUID(user_id) if is_valid_object_id(user_id) else None
        if owner_id:
            q = q.filter(Video.owner_id == owner_id)

        if viewer is None or owner_id != viewer.id:
            q = q.filter(Video.is_published.is_(True))

        return self.paginate(q, page=page, limit=limit, sort_by=sort_by, sort_type=sort_type)

    def publish(
        self,
        owner: User,
        title: Optional[str],
        description: Optional[str],
        video_asset: MediaAsset,
        thumbnail_asset: MediaAsset
    ) -> Video:
        """Create a published video from already uploaded assets."""
        return self.create(
            owner.id,
            title=require_text(title, "Title", TITLE_MAX_LENGTH),
            description=(description or "").strip(),
            video_file=video_asset.url,
            video_public_id=video_asset.public_id,
            thumbnail=thumbnail_asset.url,
            thumbnail_public_id=thumbnail_asset.public_id,
            duration=video_asset.duration or 0,
            views=0,
            likes=0,
            is_published=True
        )

    def get_for_viewer(self, raw_id, viewer: Optional[User]) -> Video:
        """Fetch a video; drafts are visible to their owner only."""
        video_id = self.parse_id(raw_id)
        video = self.db.query(Video).filter(Video.id == video_id, visible_to(viewer)).first()
        if not video:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Video not found")
        return video

    def update_video(
        self,
        raw_id,
        owner: User,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_asset: Optional[MediaAsset] = None
    ) -> Video:
        """Change title, description and/or thumbnail of an owned video."""
        values = {}
        if title is not None:
            values["title"] = require_text(title, "Title", TITLE_MAX_LENGTH)
        if description is not None:
            values["description"] = description.strip()
        if thumbnail_asset is not None:
            values["thumbnail"] = thumbnail_asset.url
            values["thumbnail_public_id"] = thumbnail_asset.public_id

        return self.update_owned(raw_id, owner.id, values)

    def delete_video(self, raw_id, owner: User, media: MediaService) -> UUID:
        """
        Remove remote assets, then the row.

        If the media host fails the row is kept and the caller gets a 500.
        """
        video = self.get_owned(raw_id, owner.id)

        try:
            media.delete(video.video_public_id, "video")
        except MediaServiceError as e:
            logger.error("Video asset delete failed for %s: %s", video.id, e)
            raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete video file from media host")

        try:
            media.delete(video.thumbnail_public_id)
        except MediaServiceError as e:
            logger.error("Thumbnail delete failed for %s: %s", video.id, e)
            raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete thumbnail from media host")

        return self.delete_owned(video.id, owner.id)

    def delete_dependents(self, resource_id: UUID):
        comment_ids = select(Comment.id).where(Comment.video_id == resource_id)
        self.db.execute(
            delete(Like)
            .where(Like.subject_type == LikeSubject.COMMENT, Like.subject_id.in_(comment_ids))
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(Like)
            .where(Like.subject_type == LikeSubject.VIDEO, Like.subject_id == resource_id)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(Comment).where(Comment.video_id == resource_id).execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(WatchHistory).where(WatchHistory.video_id == resource_id).execution_options(synchronize_session=False)
        )

    def toggle_publish(self, raw_id, owner: User) -> Video:
        """Flip is_published on an owned video."""
        return self.update_owned(raw_id, owner.id, {"is_published": not_(Video.is_published)})

    def increment_views(self, raw_id) -> Video:
        """Atomically add one view."""
        video_id = self.parse_id(raw_id)
        result = self.db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise ApiError(status.HTTP_404_NOT_FOUND, "Video not found")

        self.db.commit()
        self.db.expire_all()
        return self.get(video_id)

    def record_watch(self, video: Video, viewer: User):
        """Upsert the viewer's watch history entry for this video."""
        entry = self.db.query(WatchHistory).filter(
            WatchHistory.user_id == viewer.id,
            WatchHistory.video_id == video.id
        ).first()

        if entry:
            entry.watched_at = datetime.utcnow()
        else:
            self.db.add(WatchHistory(user_id=viewer.id, video_id=video.id))
        self.db.commit()

    def watch_history(self, viewer: User, limit: int = 50) -> List[WatchHistory]:
        """Most recently watched first."""
        return self.db.query(WatchHistory).join(Video, WatchHistory.video_id == Video.id).filter(
            WatchHistory.user_id == viewer.id
        ).order_by(WatchHistory.watched_at.desc()).limit(limit).all()