"""
User management endpoints:
  POST /users                 — register a user
  GET  /users/top             — chop-count leaderboard
  GET  /users/{id}            — fetch a user profile
  PUT  /users/{id}/profile    — complete / edit profile details
  PUT  /users/{id}/avatar     — replace the avatar URI
  POST /users/follow          — follow another user
  POST /users/unfollow        — unfollow
  GET  /users/{id}/followers  — list followers
  GET  /users/{id}/following  — list followees
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox import profiles, ranking
from chopbox.config import settings
from chopbox.database import get_db
from chopbox.repositories import FollowGraph
from chopbox.schemas import (
    AvatarUpdate,
    FollowRequest,
    LeaderboardEntry,
    ProfileUpdate,
    UserCreate,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user. The profile starts out incomplete."""
    with tracer.start_as_current_span("create_user"):
        return await profiles.register_user(db, body.username, body.email)


@router.get("/top", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: Optional[int] = Query(None, description="Number of users to return"),
    db: AsyncSession = Depends(get_db),
):
    # A non-positive limit reaches ranking.top_users and comes back as a 400
    ranked = await ranking.top_users(db, settings.leaderboard_size if limit is None else limit)
    return [
        LeaderboardEntry(user=UserResponse.model_validate(r.user), chop_count=r.chop_count)
        for r in ranked
    ]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await profiles.get_user_or_404(db, user_id)


@router.put("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: int, body: ProfileUpdate, db: AsyncSession = Depends(get_db)
):
    with tracer.start_as_current_span("update_profile"):
        return await profiles.complete_profile(db, user_id, body.model_dump())


@router.put("/{user_id}/avatar", response_model=UserResponse)
async def update_avatar(
    user_id: int, body: AvatarUpdate, db: AsyncSession = Depends(get_db)
):
    return await profiles.set_avatar(db, user_id, body.image_uri)


@router.post("/follow", status_code=status.HTTP_204_NO_CONTENT)
async def follow_user(body: FollowRequest, db: AsyncSession = Depends(get_db)):
    """Create a follower → followee edge. Following twice is a no-op."""
    with tracer.start_as_current_span("follow_user"):
        await profiles.follow(db, body.follower_id, body.followee_id)


@router.post("/unfollow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(body: FollowRequest, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("unfollow_user"):
        await profiles.unfollow(db, body.follower_id, body.followee_id)


@router.get("/{user_id}/followers")
async def list_followers(user_id: int, db: AsyncSession = Depends(get_db)):
    await profiles.get_user_or_404(db, user_id)
    followers = await FollowGraph(db).followers_of(user_id)
    return {"user_id": user_id, "followers": sorted(followers)}


@router.get("/{user_id}/following")
async def list_following(user_id: int, db: AsyncSession = Depends(get_db)):
    followees = await ranking.get_followee_ids(db, user_id)
    return {"user_id": user_id, "following": sorted(followees)}
