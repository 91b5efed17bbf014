"""
Pytest configuration and shared fixtures for Clipnest tests.
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key")
os.environ.setdefault("REFRESH_TOKEN_SECRET_KEY", "test-refresh-secret-key")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import itertools
import pytest
from typing import Callable, Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import patch

from clipnest.main import app
from clipnest.database import Base, get_db
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.models.video import Video
from clipnest.services.media_service import MediaService, get_media_service
from clipnest.utils.security import create_access_token, hash_password


# Database setup
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "Password123"


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_cloudinary():
    """
    Patch the Cloudinary SDK calls made by MediaService.

    Uploads return a fresh public id per call; .mp4 files come back as videos
    with a duration.
    """
    counter = itertools.count(1)

    def fake_upload(path, **kwargs):
        n = next(counter)
        is_video = str(path).endswith(".mp4")
        return {
            "secure_url": f"https://res.cloudinary.com/clipnest/{'video' if is_video else 'image'}/upload/asset_{n}",
            "public_id": f"asset_{n}",
            "resource_type": "video" if is_video else "image",
            "duration": 42.5 if is_video else None
        }

    with patch("cloudinary.uploader.upload", side_effect=fake_upload) as upload, \
            patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
        yield {"upload": upload, "destroy": destroy}


@pytest.fixture
def media(tmp_path, mock_cloudinary) -> MediaService:
    """MediaService writing temp files under pytest's tmp_path."""
    return MediaService(temp_dir=str(tmp_path / "uploads"))


@pytest.fixture(scope="function")
def client(test_db: Session, media: MediaService) -> TestClient:
    """
    Create a test client with overridden database and media dependencies.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# User fixtures
def _create_user(db: Session, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        full_name=username.capitalize(),
        hashed_password=hash_password(TEST_PASSWORD),
        avatar=f"https://res.cloudinary.com/clipnest/image/upload/{username}_avatar",
        avatar_public_id=f"{username}_avatar"
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(test_db: Session) -> User:
    """
    Create a test user.
    """
    return _create_user(test_db, "alice")


@pytest.fixture
def test_user2(test_db: Session) -> User:
    """
    Create a second test user for multi-user tests.
    """
    return _create_user(test_db, "bob")


@pytest.fixture
def test_user3(test_db: Session) -> User:
    return _create_user(test_db, "carol")


def _headers(user: User) -> Dict[str, str]:
    access_token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    """
    Create authentication headers with JWT token.
    """
    return _headers(test_user)


@pytest.fixture
def auth_headers2(test_user2: User) -> Dict[str, str]:
    """
    Create authentication headers for second user.
    """
    return _headers(test_user2)


@pytest.fixture
def auth_headers3(test_user3: User) -> Dict[str, str]:
    return _headers(test_user3)


# Content fixtures
@pytest.fixture
def make_video(test_db: Session) -> Callable[..., Video]:
    """Factory inserting a video row directly, bypassing uploads."""
    counter = itertools.count(1)

    def _make(owner: User, **overrides) -> Video:
        n = next(counter)
        values = {
            "title": f"Video {n}",
            "description": f"Description {n}",
            "video_file": f"https://res.cloudinary.com/clipnest/video/upload/v{n}",
            "video_public_id": f"v{n}",
            "thumbnail": f"https://res.cloudinary.com/clipnest/image/upload/t{n}",
            "thumbnail_public_id": f"t{n}",
            "duration": 10.0,
            "views": 0,
            "likes": 0,
            "is_published": True,
        }
        values.update(overrides)
        video = Video(owner_id=owner.id, **values)
        test_db.add(video)
        test_db.commit()
        test_db.refresh(video)
        return video

    return _make


@pytest.fixture
def video(make_video, test_user: User) -> Video:
    """A published video owned by test_user."""
    return make_video(test_user, title="Intro to Clipnest")


@pytest.fixture
def make_tweet(test_db: Session) -> Callable[..., Tweet]:
    def _make(owner: User, content: str = "hello") -> Tweet:
        tweet = Tweet(owner_id=owner.id, content=content, likes=0)
        test_db.add(tweet)
        test_db.commit()
        test_db.refresh(tweet)
        return tweet

    return _make
