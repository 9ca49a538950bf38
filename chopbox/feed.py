"""
Feed assembly and favourites.

get_chops builds a viewer's home feed: their own chops plus those of every
followee, newest first. favourite is the only write: it records a
(user, chop) like at most once and bumps the chop's counter only when the
record was actually created, both inside the caller's transaction.
"""
import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from chopbox.errors import ConcurrencyConflict, NotFound
from chopbox.models import Chop, User
from chopbox.repositories import ChopRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FavouriteResult:
    success: bool
    new_count: int
    # False when the user had already favourited this chop
    created: bool


async def get_chops(
    db: AsyncSession,
    viewer: User,
    followee_ids: Iterable[int],
) -> list[Chop]:
    """Chops by {viewer} ∪ followees, ordered (created_at desc, id desc)."""
    author_ids = {viewer.id, *followee_ids}
    return await ChopRepository(db).find_by_author_set(author_ids)


async def favourite(db: AsyncSession, user_id: int, chop_id: int) -> FavouriteResult:
    """
    Like a chop on behalf of a user, at most once per (user, chop).

    The chop row is locked first, then the favourite row is inserted
    conditionally and the counter is incremented only if that insert wrote a
    row; repeated calls return the current count unchanged. Nothing is
    written when either id is unknown.
    """
    if await db.get(User, user_id) is None:
        raise NotFound(f"User {user_id} not found")

    repo = ChopRepository(db)
    if not await repo.lock_chop(chop_id):
        raise NotFound(f"Chop {chop_id} not found")

    if not await repo.insert_favourite(user_id, chop_id):
        count = await repo.get_likes(chop_id)
        logger.debug("User %s already favourited chop %s", user_id, chop_id)
        return FavouriteResult(success=True, new_count=count, created=False)

    count = await repo.increment_like(chop_id)
    if count < 0:
        # Favourite row written but the chop row vanished underneath us
        raise ConcurrencyConflict(f"Chop {chop_id} changed during favourite")

    logger.info("User %s favourited chop %s (likes=%d)", user_id, chop_id, count)
    return FavouriteResult(success=True, new_count=count, created=True)
