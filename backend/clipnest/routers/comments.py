"""Comment endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user, get_optional_user
from clipnest.models.comment import Comment
from clipnest.models.like import LikeSubject
from clipnest.models.schemas import CommentCreate, CommentResponse
from clipnest.models.user import User
from clipnest.services.comment_service import CommentService
from clipnest.services.like_service import LikeService
from clipnest.utils.api_response import ApiResponse, Page, api_response

router = APIRouter()


def serialize_comments(db: Session, comments: List[Comment], viewer: Optional[User]) -> List[CommentResponse]:
    """Comments carry no counter column, so like counts are computed here."""
    likes = LikeService(db)
    ids = [c.id for c in comments]
    counts = likes.counts(LikeSubject.COMMENT, ids)
    liked = likes.liked_ids(LikeSubject.COMMENT, ids, viewer)

    items = []
    for comment in comments:
        item = CommentResponse.model_validate(comment)
        item.likes = counts.get(comment.id, 0)
        item.is_liked = comment.id in liked
        items.append(item)
    return items


@router.get("/{video_id}", response_model=ApiResponse[Page[CommentResponse]])
async def get_video_comments(
    video_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    result = CommentService(db).list_for_video(video_id, viewer, page=page, limit=limit)
    data = Page(
        items=serialize_comments(db, result.items, viewer),
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages
    )
    return api_response(status.HTTP_200_OK, data, "Comments fetched successfully")


@router.post("/{video_id}", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = CommentService(db).add_comment(video_id, current_user, comment_data.content)
    return api_response(status.HTTP_201_CREATED, CommentResponse.model_validate(comment), "Comment added successfully")


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = CommentService(db).update_comment(comment_id, current_user, comment_data.content)
    return api_response(status.HTTP_200_OK, serialize_comments(db, [comment], current_user)[0], "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    deleted_id = CommentService(db).delete_comment(comment_id, current_user)
    return api_response(status.HTTP_200_OK, {"commentId": str(deleted_id)}, "Comment deleted successfully")
