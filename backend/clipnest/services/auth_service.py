"""Account and token business logic."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional, Tuple
from uuid import UUID
import logging

from fastapi import status

from clipnest.models.user import User
from clipnest.models.schemas import UserLogin
from clipnest.services.media_service import MediaAsset, MediaService, MediaServiceError
from clipnest.services.subscription_service import SubscriptionService
from clipnest.utils.api_error import ApiError
from clipnest.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    validate_password_strength,
    verify_password,
)
from clipnest.utils.validators import FULL_NAME_MAX_LENGTH, check_length, validate_email, validate_username

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    def validate_registration(db: Session, full_name: Optional[str], email: Optional[str],
                              username: Optional[str], password: Optional[str]) -> Tuple[str, str, str]:
        """
        Check registration fields before any file is uploaded.

        Returns:
            Tuple of (full_name, email, username) normalised

        Raises:
            ApiError: 400 for missing or malformed fields, 409 when taken
        """
        fields = [full_name, email, username, password]
        if any(not (field or "").strip() for field in fields):
            raise ApiError(status.HTTP_400_BAD_REQUEST, "All fields are required")

        full_name = check_length(full_name.strip(), "Full name", FULL_NAME_MAX_LENGTH)
        email = email.strip().lower()
        username = username.strip().lower()

        for is_valid, error in (
            validate_email(email),
            validate_username(username),
            validate_password_strength(password),
        ):
            if not is_valid:
                raise ApiError(status.HTTP_400_BAD_REQUEST, error)

        existing_user = db.query(User).filter(
            (User.username == username) | (User.email == email)
        ).first()
        if existing_user:
            raise ApiError(status.HTTP_409_CONFLICT, "User with email or username already exists")

        return full_name, email, username

    @staticmethod
    def register_user(db: Session, full_name: str, email: str, username: str, password: str,
                      avatar: MediaAsset, cover_image: Optional[MediaAsset] = None) -> User:
        """Persist a validated account with its uploaded images."""
        new_user = User(
            full_name=full_name,
            email=email,
            username=username,
            hashed_password=hash_password(password),
            avatar=avatar.url,
            avatar_public_id=avatar.public_id,
            cover_image=cover_image.url if cover_image else "",
            cover_image_public_id=cover_image.public_id if cover_image else None
        )

        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent registration took the username or email after validation
            db.rollback()
            raise ApiError(status.HTTP_409_CONFLICT, "User with email or username already exists")
        db.refresh(new_user)

        logger.info("Registered user %s", new_user.id)
        return new_user

    @staticmethod
    def authenticate_user(db: Session, login_data: UserLogin) -> Tuple[Optional[User], Optional[str]]:
        """
        Authenticate a user with username or email and password.

        Args:
            db: Database session
            login_data: Login credentials

        Returns:
            Tuple of (user, error_message)
        """
        identifier = (login_data.username or login_data.email or "").strip().lower()
        if not identifier:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Username or email is required")

        user = db.query(User).filter(
            (User.username == identifier) | (User.email == identifier)
        ).first()

        if not user:
            raise ApiError(status.HTTP_404_NOT_FOUND, "User does not exist")

        if not verify_password(login_data.password, user.hashed_password):
            return None, "Invalid user credentials"

        return user, None

    @staticmethod
    def issue_tokens(db: Session, user: User) -> Tuple[str, str]:
        """
        Mint an access / refresh pair and remember the refresh token.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = create_access_token({
            "sub": str(user.id),
            "username": user.username,
            "email": user.email
        })
        refresh_token = create_refresh_token({"sub": str(user.id)})

        user.refresh_token = refresh_token
        db.commit()

        return access_token, refresh_token

    @staticmethod
    def refresh_tokens(db: Session, incoming_token: Optional[str]) -> Tuple[User, str, str]:
        """
        Rotate tokens. The presented refresh token must be the one last issued.

        Raises:
            ApiError: 401 when missing, invalid, or already rotated
        """
        if not incoming_token:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Unauthorized request")

        payload = decode_refresh_token(incoming_token)
        if not payload:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")

        user = AuthService.get_user_by_id(db, user_id)
        if not user:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")

        if incoming_token != user.refresh_token:
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Refresh token is expired or used")

        access_token, refresh_token = AuthService.issue_tokens(db, user)
        return user, access_token, refresh_token

    @staticmethod
    def logout_user(db: Session, user: User):
        """Forget the stored refresh token so it can no longer be rotated."""
        user.refresh_token = None
        db.commit()

    @staticmethod
    def change_password(db: Session, user: User, old_password: str, new_password: str):
        if not verify_password(old_password, user.hashed_password):
            raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid old password")

        is_valid, error = validate_password_strength(new_password)
        if not is_valid:
            raise ApiError(status.HTTP_400_BAD_REQUEST, error)

        user.hashed_password = hash_password(new_password)
        db.commit()

    @staticmethod
    def update_account(db: Session, user: User, full_name: Optional[str], email: Optional[str]) -> User:
        """
        Change display name and/or email.

        Raises:
            ApiError: 400 when nothing usable was sent or the email is malformed,
                409 when the email belongs to another account
        """
        full_name = (full_name or "").strip()
        email = (email or "").strip().lower()
        if not full_name and not email:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Full name or email is required")

        if email and email != user.email:
            is_valid, error = validate_email(email)
            if not is_valid:
                raise ApiError(status.HTTP_400_BAD_REQUEST, error)
            if db.query(User.id).filter(User.email == email, User.id != user.id).first():
                raise ApiError(status.HTTP_409_CONFLICT, "Email already registered")
            user.email = email

        if full_name:
            user.full_name = full_name

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def replace_image(db: Session, user: User, field: str, asset: MediaAsset, media: MediaService) -> User:
        """
        Point avatar or cover_image at a new asset and destroy the old one.

        The old asset is removed after the commit; a failed removal is logged and
        leaves an orphan on the media host rather than failing the request.
        """
        old_public_id = getattr(user, f"{field}_public_id")

        setattr(user, field, asset.url)
        setattr(user, f"{field}_public_id", asset.public_id)
        db.commit()
        db.refresh(user)

        try:
            media.delete(old_public_id)
        except MediaServiceError as e:
            logger.warning("Old %s for user %s not removed: %s", field, user.id, e)

        return user

    @staticmethod
    def channel_profile(db: Session, username: Optional[str], viewer: Optional[User]) -> dict:
        """A user seen as a channel, with follower numbers relative to the viewer."""
        username = (username or "").strip().lower()
        if not username:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Username is missing")

        channel = AuthService.get_user_by_username(db, username)
        if not channel:
            raise ApiError(status.HTTP_404_NOT_FOUND, "Channel does not exist")

        subscriptions = SubscriptionService(db)
        return {
            "id": channel.id,
            "username": channel.username,
            "full_name": channel.full_name,
            "email": channel.email,
            "avatar": channel.avatar,
            "cover_image": channel.cover_image,
            "subscribers_count": subscriptions.subscriber_count(channel.id),
            "channels_subscribed_to_count": subscriptions.subscribed_to_count(channel.id),
            "is_subscribed": subscriptions.is_subscribed(channel.id, viewer),
        }

    @staticmethod
    def get_user_by_id(db: Session, user_id: UUID) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            db: Database session
            username: Username

        Returns:
            User object or None
        """
        return db.query(User).filter(User.username == username).first()
