"""
Home page endpoint — GET /?user_id=<id>

Returns the viewer's feed (their own chops plus everyone they follow,
newest first) alongside the global chop-count leaderboard.
"""
import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox import feed, ranking
from chopbox.config import settings
from chopbox.database import get_db
from chopbox.models import User
from chopbox.routers.chops import build_chop_response
from chopbox.schemas import HomeResponse, LeaderboardEntry, UserResponse
from chopbox.telemetry import FEED_LATENCY

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("/", response_model=HomeResponse)
async def home(
    user_id: int = Query(..., description="ID of the requesting user"),
    db: AsyncSession = Depends(get_db),
):
    start_time = time.time()

    with tracer.start_as_current_span("home") as span:
        span.set_attribute("user.id", user_id)

        viewer = await db.get(User, user_id)
        if not viewer:
            raise HTTPException(status_code=404, detail="User not found")

        top = await ranking.top_users(db, settings.leaderboard_size)
        followee_ids = await ranking.get_followee_ids(db, viewer.id)
        chops = await feed.get_chops(db, viewer, followee_ids)

        span.set_attribute("feed.followees", len(followee_ids))
        span.set_attribute("feed.chops_returned", len(chops))

        latency_ms = (time.time() - start_time) * 1000
        FEED_LATENCY.observe(latency_ms / 1000)

        return HomeResponse(
            user=UserResponse.model_validate(viewer),
            chops=[build_chop_response(c) for c in chops],
            top_users=[
                LeaderboardEntry(user=UserResponse.model_validate(r.user), chop_count=r.chop_count)
                for r in top
            ],
            latency_ms=round(latency_ms, 2),
        )
