"""
Tests for comment endpoints.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from clipnest.models.comment import Comment
from clipnest.models.like import Like, LikeSubject
from clipnest.models.user import User

COMMENTS = "/api/v1/comments"


@pytest.fixture
def comment(test_db: Session, video, test_user2: User) -> Comment:
    """A comment by test_user2 on test_user's video."""
    row = Comment(owner_id=test_user2.id, video_id=video.id, content="Great video")
    test_db.add(row)
    test_db.commit()
    test_db.refresh(row)
    return row


@pytest.mark.integration
class TestComments:

    def test_add_comment(self, client: TestClient, video, auth_headers2):
        response = client.post(f"{COMMENTS}/{video.id}", json={"content": " First! "}, headers=auth_headers2)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "First!"
        assert data["videoId"] == str(video.id)
        assert data["owner"]["username"] == "bob"

    def test_add_comment_to_missing_video(self, client: TestClient, test_db: Session, auth_headers):
        response = client.post(f"{COMMENTS}/{uuid.uuid4()}", json={"content": "hi"}, headers=auth_headers)

        assert response.status_code == 404
        assert test_db.query(Comment).count() == 0

    def test_add_empty_comment(self, client: TestClient, test_db: Session, video, auth_headers):
        response = client.post(f"{COMMENTS}/{video.id}", json={"content": "  "}, headers=auth_headers)

        assert response.status_code == 400
        assert test_db.query(Comment).count() == 0

    def test_list_comments_is_public(self, client: TestClient, comment, video):
        response = client.get(f"{COMMENTS}/{video.id}")

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["content"] == "Great video"
        assert page["items"][0]["isLiked"] is False

    def test_list_comments_with_like_counts(self, client: TestClient, test_db: Session, comment, video,
                                            test_user: User, auth_headers):
        test_db.add(Like(subject_type=LikeSubject.COMMENT, subject_id=comment.id, liked_by_id=test_user.id))
        test_db.commit()

        response = client.get(f"{COMMENTS}/{video.id}", headers=auth_headers)

        item = response.json()["data"]["items"][0]
        assert item["likes"] == 1
        assert item["isLiked"] is True

    def test_list_for_missing_video(self, client: TestClient):
        response = client.get(f"{COMMENTS}/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_list_with_malformed_video_id(self, client: TestClient):
        response = client.get(f"{COMMENTS}/garbage")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid video ID"

    def test_update_comment(self, client: TestClient, comment, auth_headers2):
        response = client.patch(f"{COMMENTS}/c/{comment.id}", json={"content": "Edited"}, headers=auth_headers2)

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "Edited"

    def test_video_owner_cannot_edit_others_comment(self, client: TestClient, comment, auth_headers):
        response = client.patch(f"{COMMENTS}/c/{comment.id}", json={"content": "Censored"}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Comment not found or unauthorized"

    def test_delete_comment_removes_likes(self, client: TestClient, test_db: Session, comment, test_user: User,
                                          auth_headers2):
        comment_id = comment.id
        test_db.add(Like(subject_type=LikeSubject.COMMENT, subject_id=comment_id, liked_by_id=test_user.id))
        test_db.commit()

        response = client.delete(f"{COMMENTS}/c/{comment_id}", headers=auth_headers2)

        assert response.status_code == 200
        assert test_db.query(Comment).count() == 0
        assert test_db.query(Like).count() == 0

    def test_delete_missing_comment(self, client: TestClient, auth_headers):
        response = client.delete(f"{COMMENTS}/c/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404

    def test_add_over_long_comment(self, client: TestClient, test_db: Session, video, auth_headers2):
        response = client.post(f"{COMMENTS}/{video.id}", json={"content": "x" * 10001}, headers=auth_headers2)

        assert response.status_code == 400
        assert response.json()["message"] == "Content is too long"
        assert test_db.query(Comment).count() == 0


@pytest.mark.integration
class TestDraftComments:
    """Comments on an unpublished video are only reachable by its owner."""

    @pytest.fixture
    def draft(self, make_video, test_user: User):
        return make_video(test_user, is_published=False)

    def test_anonymous_cannot_list(self, client: TestClient, draft):
        response = client.get(f"{COMMENTS}/{draft.id}")

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    def test_non_owner_cannot_list(self, client: TestClient, draft, auth_headers2):
        response = client.get(f"{COMMENTS}/{draft.id}", headers=auth_headers2)

        assert response.status_code == 404

    def test_non_owner_cannot_comment(self, client: TestClient, test_db: Session, draft, auth_headers2):
        response = client.post(f"{COMMENTS}/{draft.id}", json={"content": "sneak peek"}, headers=auth_headers2)

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"
        assert test_db.query(Comment).count() == 0

    def test_owner_can_comment_and_list(self, client: TestClient, draft, auth_headers):
        created = client.post(f"{COMMENTS}/{draft.id}", json={"content": "todo: trim"}, headers=auth_headers)
        assert created.status_code == 201

        response = client.get(f"{COMMENTS}/{draft.id}", headers=auth_headers)

        assert response.status_code == 200
        assert [item["content"] for item in response.json()["data"]["items"]] == ["todo: trim"]
