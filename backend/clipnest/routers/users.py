"""Account, token and channel endpoints."""

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from clipnest.config import settings
from clipnest.database import get_db
from clipnest.middleware.auth import ACCESS_COOKIE, REFRESH_COOKIE, get_current_user, get_optional_user
from clipnest.models.schemas import (
    AccountUpdate,
    AuthTokens,
    ChannelProfile,
    PasswordChange,
    RefreshRequest,
    UserLogin,
    UserResponse,
    WatchHistoryEntry,
)
from clipnest.models.user import User
from clipnest.services.auth_service import AuthService
from clipnest.services.media_service import MediaService, get_media_service
from clipnest.services.video_service import VideoService
from clipnest.utils.api_error import ApiError
from clipnest.utils.api_response import ApiResponse, api_response

router = APIRouter()

# Handlers that call the media host are plain functions so they run in the threadpool


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str):
    options = {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": "lax"}
    response.set_cookie(ACCESS_COOKIE, access_token, max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60, **options)
    response.set_cookie(REFRESH_COOKIE, refresh_token, max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 86400, **options)


def _clear_auth_cookies(response: Response):
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def register(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    """
    Register a new user.

    Requirements:
    - fullName, email, username, password
    - Unique email and username (3-50 chars, alphanumeric + underscore)
    - Password of 8-72 characters with a letter and a digit
    - Avatar image; cover image optional

    Fields are validated before anything is sent to the media host.
    """
    full_name, email, username = AuthService.validate_registration(db, full_name, email, username, password)

    avatar_asset = media.store(avatar, "avatar file")
    cover_asset = None
    try:
        cover_asset = media.store(cover_image, "cover image", required=False)
        user = AuthService.register_user(db, full_name, email, username, password, avatar_asset, cover_asset)
    except Exception:
        media.discard(avatar_asset, cover_asset)
        raise

    return api_response(status.HTTP_201_CREATED, UserResponse.model_validate(user), "User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthTokens])
async def login(
    login_data: UserLogin,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Login with username or email and password.

    Sets httpOnly ``accessToken`` / ``refreshToken`` cookies and also returns
    both tokens for clients that send a Bearer header instead.
    """
    user, error = AuthService.authenticate_user(db, login_data)

    if error:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, error)

    access_token, refresh_token = AuthService.issue_tokens(db, user)
    _set_auth_cookies(response, access_token, refresh_token)

    tokens = AuthTokens(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token
    )
    return api_response(status.HTTP_200_OK, tokens, "User logged in successfully")


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invalidate the stored refresh token and clear auth cookies."""
    AuthService.logout_user(db, current_user)
    _clear_auth_cookies(response)
    return api_response(status.HTTP_200_OK, {}, "User logged out")


@router.post("/refresh-token", response_model=ApiResponse[AuthTokens])
async def refresh_access_token(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = Body(None),
    db: Session = Depends(get_db)
):
    """
    Exchange a refresh token for a new token pair.

    The refresh token is read from the cookie, or from the JSON body.
    """
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)

    user, access_token, refresh_token = AuthService.refresh_tokens(db, incoming)
    _set_auth_cookies(response, access_token, refresh_token)

    tokens = AuthTokens(access_token=access_token, refresh_token=refresh_token)
    return api_response(status.HTTP_200_OK, tokens, "Access token refreshed")


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    AuthService.change_password(db, current_user, password_data.old_password, password_data.new_password)
    return api_response(status.HTTP_200_OK, {}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user's information.

    Requires:
        accessToken cookie or Authorization: Bearer <token>
    """
    return api_response(status.HTTP_200_OK, UserResponse.model_validate(current_user), "User fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account(
    account_data: AccountUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = AuthService.update_account(db, current_user, account_data.full_name, account_data.email)
    return api_response(status.HTTP_200_OK, UserResponse.model_validate(user), "Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    """Replace the avatar; the previous image is removed from the media host."""
    asset = media.store(avatar, "avatar file")
    user = AuthService.replace_image(db, current_user, "avatar", asset, media)
    return api_response(status.HTTP_200_OK, UserResponse.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
def update_cover_image(
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service)
):
    asset = media.store(cover_image, "cover image file")
    user = AuthService.replace_image(db, current_user, "cover_image", asset, media)
    return api_response(status.HTTP_200_OK, UserResponse.model_validate(user), "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
async def get_channel_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    Public channel page data.

    isSubscribed is relative to the signed-in viewer and false for anonymous requests.
    """
    profile = AuthService.channel_profile(db, username, viewer)
    return api_response(status.HTTP_200_OK, ChannelProfile.model_validate(profile), "User channel fetched successfully")


@router.get("/history", response_model=ApiResponse[List[WatchHistoryEntry]])
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    entries = VideoService(db).watch_history(current_user)
    return api_response(
        status.HTTP_200_OK,
        [WatchHistoryEntry.model_validate(entry) for entry in entries],
        "Watch history fetched successfully"
    )
