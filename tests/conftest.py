import os

# Must be set before chopbox.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TRACING_ENABLED", "false")

from datetime import datetime, timedelta  # noqa: E402

import fakeredis  # noqa: E402
import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from chopbox.clients import redis_client  # noqa: E402
from chopbox.database import Base, get_db  # noqa: E402
from chopbox.main import app  # noqa: E402
from chopbox.models import Chop, Follow, User  # noqa: E402

BASE_TIME = datetime(2015, 7, 22, 12, 0, 0)


@pytest.fixture
async def engine(tmp_path):
    # A file-backed database so concurrent sessions get separate connections
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chopbox.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def fake_redis():
    r = fakeredis.FakeAsyncRedis(decode_responses=True)
    redis_client.set_redis(r)
    yield r
    redis_client.set_redis(None)
    await r.aclose()


# ── Data helpers ───────────────────────────────────────────────────────────

async def make_user(db, username: str) -> User:
    user = User(username=username, email=f"{username}@example.com")
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def make_chop(db, user: User, text: str, minutes: int = 0) -> Chop:
    chop = Chop(
        user_id=user.id,
        chops_name=text,
        likes=0,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(chop)
    await db.flush()
    return chop


async def make_follow(db, follower: User, followee: User) -> None:
    db.add(Follow(follower_id=follower.id, followee_id=followee.id))
    await db.flush()
