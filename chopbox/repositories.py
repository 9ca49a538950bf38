"""
Data-access layer the feed and ranking code is built on.

  ChopRepository — content repository (chops, like counter, favourites)
  FollowGraph    — read-only follow-graph accessor

Both wrap a request-scoped AsyncSession and never commit; the caller owns
the transaction.
"""
from typing import Iterable

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox.models import Chop, Favourite, Follow

chops_table = Chop.__table__
favourites_table = Favourite.__table__


# ── Favourite write statements, in the order favourite() issues them ───────

def lock_chop_stmt(chop_id: int):
    return select(chops_table.c.id).where(chops_table.c.id == chop_id).with_for_update()


def insert_favourite_stmt(user_id: int, chop_id: int):
    # INSERT IGNORE (MySQL / TiDB) or INSERT OR IGNORE (SQLite)
    return (
        insert(favourites_table)
        .values(user_id=user_id, chop_id=chop_id)
        .prefix_with("IGNORE", dialect="mysql")
        .prefix_with("OR IGNORE", dialect="sqlite")
    )


def increment_like_stmt(chop_id: int):
    return (
        update(chops_table)
        .where(chops_table.c.id == chop_id)
        .values(likes=chops_table.c.likes + 1)
    )


class ChopRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_author_set(self, author_ids: Iterable[int]) -> list[Chop]:
        """All chops by the given authors, newest first (ties: higher id first)."""
        ids = set(author_ids)
        if not ids:
            return []
        rows = await self.db.execute(
            select(Chop)
            .where(Chop.user_id.in_(ids))
            .order_by(Chop.created_at.desc(), Chop.id.desc())
        )
        return list(rows.scalars().unique().all())

    async def count_by_author(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Chop.id)).where(Chop.user_id == user_id)
        )
        return result.scalar_one()

    async def get_likes(self, chop_id: int) -> int:
        result = await self.db.execute(select(Chop.likes).where(Chop.id == chop_id))
        return result.scalar_one()

    async def lock_chop(self, chop_id: int) -> bool:
        """
        Take the exclusive row lock on a chop (SELECT ... FOR UPDATE) for the
        rest of the transaction. Returns False if the chop does not exist.

        Must run before insert_favourite: the favourites.chop_id foreign key
        makes that insert take a shared lock on the same row, and two
        writers each holding it would deadlock on the later UPDATE.
        """
        return await self.db.scalar(lock_chop_stmt(chop_id)) is not None

    async def increment_like(self, chop_id: int) -> int:
        """
        Add one like in a single UPDATE (likes = likes + 1) so concurrent
        writers never lose an increment. Returns the stored count, or -1 if
        no row matched.
        """
        result = await self.db.execute(increment_like_stmt(chop_id))
        if result.rowcount == 0:
            return -1
        return await self.get_likes(chop_id)

    async def insert_favourite(self, user_id: int, chop_id: int) -> bool:
        """
        Insert the (user, chop) favourite unless it already exists.

        The composite primary key makes the insert conditional on the store
        itself. Returns True only when this call wrote the row.
        """
        result = await self.db.execute(insert_favourite_stmt(user_id, chop_id))
        return result.rowcount == 1


class FollowGraph:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def followees_of(self, user_id: int) -> set[int]:
        rows = await self.db.execute(
            select(Follow.followee_id).where(Follow.follower_id == user_id)
        )
        return set(rows.scalars().all())

    async def followers_of(self, user_id: int) -> set[int]:
        rows = await self.db.execute(
            select(Follow.follower_id).where(Follow.followee_id == user_id)
        )
        return set(rows.scalars().all())
