"""
Chop endpoints:
  POST /chops                       — publish a chop
  GET  /chops/{id}                  — fetch a single chop
  POST /chops/favourite/{id}        — favourite a chop, returns {count}
  GET  /chops/{id}/comments         — comments, oldest first
  POST /chops/{id}/comments         — add a comment
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox import feed
from chopbox.database import get_db
from chopbox.models import Chop, Comment, User
from chopbox.schemas import (
    ChopCreate,
    ChopResponse,
    CommentCreate,
    CommentResponse,
    FavouriteRequest,
    FavouriteResponse,
)
from chopbox.telemetry import CHOPS_CREATED_TOTAL, FAVOURITES_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def build_chop_response(chop: Chop, author: Optional[User] = None) -> ChopResponse:
    author = author or chop.author
    return ChopResponse(
        id=chop.id,
        user_id=chop.user_id,
        username=author.username if author else None,
        image_uri=author.image_uri if author else None,
        chops_name=chop.chops_name,
        likes=chop.likes,
        created_at=chop.created_at,
    )


def _build_comment_response(comment: Comment, author: Optional[User] = None) -> CommentResponse:
    author = author or comment.author
    return CommentResponse(
        id=comment.id,
        chop_id=comment.chop_id,
        user_id=comment.user_id,
        username=author.username if author else None,
        body=comment.body,
        created_at=comment.created_at,
    )


@router.post("/", response_model=ChopResponse, status_code=status.HTTP_201_CREATED)
async def create_chop(body: ChopCreate, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("create_chop") as span:
        author = await db.get(User, body.user_id)
        if not author:
            raise HTTPException(status_code=404, detail="Author not found")

        chop = Chop(user_id=body.user_id, chops_name=body.chops_name.strip(), likes=0)
        db.add(chop)
        await db.flush()        # materialise id
        await db.refresh(chop)  # load server-generated created_at

        span.set_attribute("chop.id", chop.id)
        span.set_attribute("chop.user_id", chop.user_id)

        CHOPS_CREATED_TOTAL.inc()
        logger.info("Chop created: %s by user %s", chop.id, chop.user_id)
        return build_chop_response(chop, author)


@router.get("/{chop_id}", response_model=ChopResponse)
async def get_chop(chop_id: int, db: AsyncSession = Depends(get_db)):
    chop = await db.get(Chop, chop_id)
    if not chop:
        raise HTTPException(status_code=404, detail="Chop not found")
    return build_chop_response(chop)


@router.post("/favourite/{chop_id}", response_model=FavouriteResponse)
async def favourite_chop(
    chop_id: int, body: FavouriteRequest, db: AsyncSession = Depends(get_db)
):
    """Favourite a chop. Idempotent per user; unknown ids surface as 404."""
    with tracer.start_as_current_span("favourite_chop") as span:
        span.set_attribute("chop.id", chop_id)
        span.set_attribute("user.id", body.user_id)

        result = await feed.favourite(db, body.user_id, chop_id)

        FAVOURITES_TOTAL.labels(outcome="created" if result.created else "duplicate").inc()
        return FavouriteResponse(count=result.new_count)


@router.get("/{chop_id}/comments", response_model=list[CommentResponse])
async def list_comments(chop_id: int, db: AsyncSession = Depends(get_db)):
    if not await db.get(Chop, chop_id):
        raise HTTPException(status_code=404, detail="Chop not found")
    rows = await db.execute(
        select(Comment)
        .where(Comment.chop_id == chop_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return [_build_comment_response(c) for c in rows.scalars().all()]


@router.post(
    "/{chop_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    chop_id: int, body: CommentCreate, db: AsyncSession = Depends(get_db)
):
    with tracer.start_as_current_span("add_comment"):
        if not await db.get(Chop, chop_id):
            raise HTTPException(status_code=404, detail="Chop not found")
        author = await db.get(User, body.user_id)
        if not author:
            raise HTTPException(status_code=404, detail="User not found")

        comment = Comment(chop_id=chop_id, user_id=body.user_id, body=body.body.strip())
        db.add(comment)
        await db.flush()
        await db.refresh(comment)

        logger.info("Comment %s added to chop %s by %s", comment.id, chop_id, body.user_id)
        return _build_comment_response(comment, author)
