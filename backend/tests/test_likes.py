"""
Tests for like toggles.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.services.toggle import counter_adjuster, toggle_row
from clipnest.utils.api_error import ApiError

LIKES = "/api/v1/likes"


@pytest.mark.integration
class TestVideoLikes:

    def test_toggle_twice_restores_state(self, client: TestClient, test_db: Session, video, auth_headers2):
        video_id = video.id

        first = client.post(f"{LIKES}/toggle/v/{video_id}", headers=auth_headers2)
        assert first.status_code == 200
        assert first.json()["data"] == {"isLiked": True, "likes": 1}
        assert first.json()["message"] == "Liked successfully"

        second = client.post(f"{LIKES}/toggle/v/{video_id}", headers=auth_headers2)
        assert second.json()["data"] == {"isLiked": False, "likes": 0}

        assert test_db.query(Like).count() == 0
        assert test_db.query(Video).filter(Video.id == video_id).one().likes == 0

    def test_likes_from_two_users(self, client: TestClient, video, auth_headers, auth_headers2):
        client.post(f"{LIKES}/toggle/v/{video.id}", headers=auth_headers)
        response = client.post(f"{LIKES}/toggle/v/{video.id}", headers=auth_headers2)

        assert response.json()["data"]["likes"] == 2

    def test_missing_video(self, client: TestClient, test_db: Session, auth_headers):
        response = client.post(f"{LIKES}/toggle/v/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"
        assert test_db.query(Like).count() == 0

    def test_malformed_id(self, client: TestClient, auth_headers):
        response = client.post(f"{LIKES}/toggle/v/123", headers=auth_headers)

        assert response.status_code == 400

    def test_requires_auth(self, client: TestClient, video):
        response = client.post(f"{LIKES}/toggle/v/{video.id}")

        assert response.status_code == 401

    def test_liked_videos(self, client: TestClient, make_video, test_user: User, auth_headers2):
        liked = make_video(test_user, title="liked")
        make_video(test_user, title="not liked")
        client.post(f"{LIKES}/toggle/v/{liked.id}", headers=auth_headers2)

        response = client.get(f"{LIKES}/videos", headers=auth_headers2)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [item["video"]["title"] for item in data] == ["liked"]
        assert data[0]["video"]["owner"]["username"] == "alice"


@pytest.mark.integration
class TestCommentLikes:

    def test_comment_like_count_is_derived(self, client: TestClient, test_db: Session, video,
                                           test_user2: User, auth_headers, auth_headers2):
        comment = Comment(owner_id=test_user2.id, video_id=video.id, content="hi")
        test_db.add(comment)
        test_db.commit()
        comment_id = comment.id

        client.post(f"{LIKES}/toggle/c/{comment_id}", headers=auth_headers)
        response = client.post(f"{LIKES}/toggle/c/{comment_id}", headers=auth_headers2)

        assert response.json()["data"] == {"isLiked": True, "likes": 2}

    def test_missing_comment(self, client: TestClient, auth_headers):
        response = client.post(f"{LIKES}/toggle/c/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Comment not found"

    def test_missing_tweet(self, client: TestClient, auth_headers):
        response = client.post(f"{LIKES}/toggle/t/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.unit
class TestToggleRow:
    """The shared toggle primitive."""

    def test_insert_then_delete(self, test_db: Session, test_user: User):
        criteria = {"subject_type": LikeSubject.TWEET, "subject_id": uuid.uuid4(), "liked_by_id": test_user.id}
        deltas = []

        assert toggle_row(test_db, Like, criteria, on_change=deltas.append) is True
        assert toggle_row(test_db, Like, criteria, on_change=deltas.append) is False
        assert deltas == [1, -1]
        assert test_db.query(Like).count() == 0

    def test_concurrent_insert_is_conflict(self, test_db: Session, test_user: User):
        criteria = {"subject_type": LikeSubject.TWEET, "subject_id": uuid.uuid4(), "liked_by_id": test_user.id}

        with patch.object(test_db, "commit", side_effect=IntegrityError("INSERT", {}, Exception("dup"))):
            with pytest.raises(ApiError) as exc_info:
                toggle_row(test_db, Like, criteria)

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Concurrent toggle, please retry"

    def test_interleaved_unlike_decrements_once(self, test_db: Session, test_user: User, make_tweet):
        tweet_id = make_tweet(test_user).id
        criteria = {"subject_type": LikeSubject.TWEET, "subject_id": tweet_id, "liked_by_id": test_user.id}
        toggle_row(test_db, Like, criteria, on_change=counter_adjuster(test_db, Tweet, tweet_id))

        real_execute = test_db.execute
        competing = []

        def unlike_elsewhere_first(statement, *args, **kwargs):
            # A second request removes the like after this one has seen it
            if isinstance(statement, Delete) and not competing:
                other = Session(bind=test_db.get_bind())
                try:
                    competing.append(
                        toggle_row(other, Like, criteria, on_change=counter_adjuster(other, Tweet, tweet_id))
                    )
                finally:
                    other.close()
            return real_execute(statement, *args, **kwargs)

        with patch.object(test_db, "execute", side_effect=unlike_elsewhere_first):
            with pytest.raises(ApiError) as exc_info:
                toggle_row(test_db, Like, criteria, on_change=counter_adjuster(test_db, Tweet, tweet_id))

        assert competing == [False]
        assert exc_info.value.status_code == 409
        test_db.expire_all()
        assert test_db.query(Like).count() == 0
        assert test_db.query(Tweet.likes).filter(Tweet.id == tweet_id).scalar() == 0


@pytest.mark.integration
class TestDraftLikes:
    """Unpublished videos, and comments on them, are hidden from everyone but the owner."""

    def test_non_owner_cannot_like_draft(self, client: TestClient, test_db: Session, make_video,
                                         test_user: User, auth_headers2):
        draft = make_video(test_user, is_published=False)

        response = client.post(f"{LIKES}/toggle/v/{draft.id}", headers=auth_headers2)

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"
        assert test_db.query(Like).count() == 0

    def test_owner_can_like_draft(self, client: TestClient, make_video, test_user: User, auth_headers):
        draft = make_video(test_user, is_published=False)

        response = client.post(f"{LIKES}/toggle/v/{draft.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"isLiked": True, "likes": 1}

    def test_non_owner_cannot_like_comment_on_draft(self, client: TestClient, test_db: Session, make_video,
                                                    test_user: User, auth_headers2):
        draft = make_video(test_user, is_published=False)
        comment = Comment(content="note to self", video_id=draft.id, owner_id=test_user.id)
        test_db.add(comment)
        test_db.commit()
        comment_id = comment.id

        response = client.post(f"{LIKES}/toggle/c/{comment_id}", headers=auth_headers2)

        assert response.status_code == 404
        assert response.json()["message"] == "Comment not found"
        assert test_db.query(Like).count() == 0
