"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=255)
    email: str = Field(..., max_length=255, pattern=r"^\s*[^@\s]+@[^@\s]+\.[^@\s]+\s*$")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    profile_state: bool
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    gender: Optional[str] = None
    best_food: Optional[str] = None
    image_uri: Optional[str] = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    firstname: Optional[str] = Field(None, max_length=100)
    lastname: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    about: Optional[str] = None
    gender: Optional[str] = Field(None, max_length=20)
    best_food: Optional[str] = Field(None, max_length=255)


class AvatarUpdate(BaseModel):
    image_uri: str = Field(..., min_length=1, max_length=500)


class FollowRequest(BaseModel):
    follower_id: int
    followee_id: int


class LeaderboardEntry(BaseModel):
    user: UserResponse
    chop_count: int


# ──────────────────────────── Chops ───────────────────────────────────────

class ChopCreate(BaseModel):
    user_id: int
    chops_name: str = Field(..., min_length=1, max_length=5000)


class ChopResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    username: Optional[str] = None
    image_uri: Optional[str] = None
    chops_name: str
    likes: int
    created_at: datetime


class FavouriteRequest(BaseModel):
    user_id: int


class FavouriteResponse(BaseModel):
    count: int


class CommentCreate(BaseModel):
    user_id: int
    body: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chop_id: int
    user_id: int
    username: Optional[str] = None
    body: str
    created_at: datetime


# ──────────────────────────── Home ────────────────────────────────────────

class HomeResponse(BaseModel):
    """Feed for the viewer plus the global leaderboard."""
    user: UserResponse
    chops: list[ChopResponse]
    top_users: list[LeaderboardEntry]
    latency_ms: float


# ──────────────────────────── Links ───────────────────────────────────────

class ExpandResponse(BaseModel):
    short_url: str
    hash: str
    long_url: str
