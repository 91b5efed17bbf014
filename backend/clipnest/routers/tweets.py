"""Tweet endpoints. Every route requires authentication."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from clipnest.database import get_db
from clipnest.middleware.auth import get_current_user
from clipnest.models.like import LikeSubject
from clipnest.models.schemas import TweetCreate, TweetResponse
from clipnest.models.tweet import Tweet
from clipnest.models.user import User
from clipnest.services.like_service import LikeService
from clipnest.services.tweet_service import TweetService
from clipnest.utils.api_response import ApiResponse, Page, api_response

router = APIRouter()


def serialize_tweets(db: Session, tweets: List[Tweet], viewer: Optional[User]) -> List[TweetResponse]:
    liked = LikeService(db).liked_ids(LikeSubject.TWEET, [t.id for t in tweets], viewer)
    items = []
    for tweet in tweets:
        item = TweetResponse.model_validate(tweet)
        item.is_liked = tweet.id in liked
        items.append(item)
    return items


@router.get("", response_model=ApiResponse[Page[TweetResponse]])
async def list_tweets(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Newest tweets first, each flagged with whether the caller liked it."""
    result = TweetService(db).list_tweets(page=page, limit=limit)
    data = Page(
        items=serialize_tweets(db, result.items, current_user),
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages
    )
    return api_response(status.HTTP_200_OK, data, "Tweets fetched successfully")


@router.post("", response_model=ApiResponse[TweetResponse], status_code=status.HTTP_201_CREATED)
async def create_tweet(
    tweet_data: TweetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tweet = TweetService(db).create_tweet(current_user, tweet_data.content)
    return api_response(status.HTTP_201_CREATED, TweetResponse.model_validate(tweet), "Tweet created successfully")


@router.get("/user/{user_id}", response_model=ApiResponse[List[TweetResponse]])
async def get_user_tweets(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tweets = TweetService(db).user_tweets(user_id)
    return api_response(status.HTTP_200_OK, serialize_tweets(db, tweets, current_user), "User tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetResponse])
async def update_tweet(
    tweet_id: str,
    tweet_data: TweetCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tweet = TweetService(db).update_tweet(tweet_id, current_user, tweet_data.content)
    return api_response(status.HTTP_200_OK, serialize_tweets(db, [tweet], current_user)[0], "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def delete_tweet(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    deleted_id = TweetService(db).delete_tweet(tweet_id, current_user)
    return api_response(status.HTTP_200_OK, {"tweetId": str(deleted_id)}, "Tweet deleted successfully")
