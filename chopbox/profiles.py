"""
Account and profile operations: registration, first-time profile completion,
avatars and the follow graph writes.
"""
import hashlib
import logging
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chopbox.config import settings
from chopbox.errors import Conflict, InvalidArgument, NotFound
from chopbox.models import Follow, User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("firstname", "lastname", "location", "about", "gender", "best_food")


def gravatar_uri(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"{settings.gravatar_base_url}{digest}?{settings.gravatar_query}"


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


async def _find_taken(db: AsyncSession, username: str, email: str) -> Optional[User]:
    existing = await db.execute(
        select(User).where(or_(User.username == username, User.email == email))
    )
    return existing.scalars().first()


async def register_user(db: AsyncSession, username: str, email: str) -> User:
    username = username.strip()
    email = email.strip().lower()

    taken = await _find_taken(db, username, email)
    if taken is not None:
        field = "Username" if taken.username == username else "Email"
        raise Conflict(f"{field} already taken")

    user = User(username=username, email=email, profile_state=False)
    db.add(user)
    try:
        await db.flush()   # materialise id
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same name or email
        await db.rollback()
        raise Conflict("Username or email already taken") from exc
    await db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


async def complete_profile(db: AsyncSession, user_id: int, fields: dict) -> User:
    """
    Store profile details and mark the profile as completed.

    A user without an avatar gets their gravatar image.
    """
    user = await get_user_or_404(db, user_id)
    for name in PROFILE_FIELDS:
        value: Optional[str] = fields.get(name)
        setattr(user, name, value.strip() if value is not None else None)

    if not user.profile_state:
        user.profile_state = True
        logger.info("User %s completed their profile", user.id)

    if user.image_uri is None:
        user.image_uri = gravatar_uri(user.email)

    await db.flush()
    return user


async def set_avatar(db: AsyncSession, user_id: int, image_uri: str) -> User:
    user = await get_user_or_404(db, user_id)
    user.image_uri = image_uri.strip()
    await db.flush()
    return user


async def follow(db: AsyncSession, follower_id: int, followee_id: int) -> bool:
    """Create the follower → followee edge. Returns False if it already existed."""
    if follower_id == followee_id:
        raise InvalidArgument("Cannot follow yourself")
    for uid in (follower_id, followee_id):
        await get_user_or_404(db, uid)

    existing = await db.get(Follow, (follower_id, followee_id))
    if existing is not None:
        return False

    db.add(Follow(follower_id=follower_id, followee_id=followee_id))
    await db.flush()
    logger.info("%s followed %s", follower_id, followee_id)
    return True


async def unfollow(db: AsyncSession, follower_id: int, followee_id: int) -> None:
    await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.followee_id == followee_id,
        )
    )
