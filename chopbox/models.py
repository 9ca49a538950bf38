"""
SQLAlchemy ORM models.

Tables:
  users      — identity + optional profile fields
  follows    — social graph edges (follower → followee)
  chops      — microblog posts with a denormalised like counter
  favourites — user × chop like records (at most one per pair)
  comments   — replies on a chop, oldest first

Identifiers are auto-increment integers: ascending id is insertion order,
which both the leaderboard and the feed use as their tie-break.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chopbox.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Flips to True the first time the profile form is submitted
    profile_state: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    firstname: Mapped[Optional[str]] = mapped_column(String(100))
    lastname: Mapped[Optional[str]] = mapped_column(String(100))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    about: Mapped[Optional[str]] = mapped_column(Text)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    best_food: Mapped[Optional[str]] = mapped_column(String(255))
    image_uri: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class Follow(Base):
    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    followee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        # "who follows user X?"
        Index("idx_followee", "followee_id"),
        CheckConstraint("follower_id <> followee_id", name="ck_no_self_follow"),
    )


class Chop(Base):
    __tablename__ = "chops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    chops_name: Mapped[str] = mapped_column(Text, nullable=False)
    # Only ever changed through feed.favourite()
    likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    author = relationship("User", lazy="joined")

    __table_args__ = (
        Index("idx_chops_user", "user_id"),
        Index("idx_chops_created", "created_at"),
        CheckConstraint("likes >= 0", name="ck_chops_likes_non_negative"),
    )


class Favourite(Base):
    __tablename__ = "favourites"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True
    )
    chop_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chops.id"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chop_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("chops.id"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    author = relationship("User", lazy="joined")

    __table_args__ = (Index("idx_comments_chop", "chop_id", "created_at"),)
