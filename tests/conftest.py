"""Shared fixtures: in-memory Redis and throwaway SQLite databases."""
import os

from tests.support import INTERNAL_TOKEN

# Settings are cached on first read; set the token before anything loads them
os.environ["INTERNAL_API_TOKEN"] = INTERNAL_TOKEN

import pytest  # noqa: E402
from fakeredis import FakeAsyncRedis, FakeServer  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402

from catalog_sync.config import Settings  # noqa: E402
from catalog_sync.database import init_db  # noqa: E402
from catalog_sync.services.cache import CacheService  # noqa: E402


@pytest.fixture
async def redis_client():
    client = FakeAsyncRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def cache(redis_client):
    return CacheService(redis_client)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        sync_batch_size=2,
        internal_api_token=INTERNAL_TOKEN,
    )


@pytest.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog_sync_test.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
