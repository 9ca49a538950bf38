"""
User ranking: the chop-count leaderboard and follow-graph lookups.

top_users orders users by number of chops, descending, with ties broken by
ascending user id so the output is reproducible between calls.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox.errors import InvalidArgument, NotFound
from chopbox.models import Chop, User
from chopbox.repositories import FollowGraph

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class RankedUser:
    user: User
    chop_count: int


async def top_users(db: AsyncSession, limit: int = DEFAULT_LIMIT) -> list[RankedUser]:
    """
    Return at most `limit` users with their chop counts.

    Users without any chops are left out, so an empty store yields [].
    """
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        raise InvalidArgument(f"limit must be a positive integer, got {limit!r}")

    chop_count = func.count(Chop.id).label("chop_count")
    rows = await db.execute(
        select(User, chop_count)
        .join(Chop, Chop.user_id == User.id)
        .group_by(User.id)
        .order_by(chop_count.desc(), User.id.asc())
        .limit(limit)
    )
    return [RankedUser(user=user, chop_count=count) for user, count in rows.all()]


async def get_followee_ids(db: AsyncSession, user_id: int) -> set[int]:
    """Ids of everyone `user_id` follows. Raises NotFound for unknown users."""
    if await db.get(User, user_id) is None:
        raise NotFound(f"User {user_id} not found")
    return await FollowGraph(db).followees_of(user_id)
