import os
import sys

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Add project root to path so the demonlist package is importable without installing it
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Load test environment variables from .env.test in the project root
dotenv_path = os.path.join(project_root, '.env.test')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)

from demonlist.config.settings import settings as _app_settings
from demonlist.core.demons import create_demon
from demonlist.models.base import Base
from demonlist.models.dtos import PostDemon
from demonlist.utils.db_session import get_async_engine, get_async_session_factory


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """
    Point the application at a fresh SQLite database for one test.

    The application code opens its own sessions through the cached engine, so
    the settings are patched and the caches cleared before and after.
    """
    original_url = _app_settings.DATABASE_URL
    _app_settings.DATABASE_URL = f"sqlite+aiosqlite:///{tmp_path / 'demonlist_test.db'}"
    get_async_engine.cache_clear()  # type: ignore[attr-defined]
    get_async_session_factory.cache_clear()  # type: ignore[attr-defined]

    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
    _app_settings.DATABASE_URL = original_url
    get_async_engine.cache_clear()  # type: ignore[attr-defined]
    get_async_session_factory.cache_clear()  # type: ignore[attr-defined]


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    """Provide a session on the test database for seeding and verification."""
    session = get_async_session_factory()()
    yield session
    await session.close()


@pytest.fixture
def add_demon(db_engine):
    """Returns a coroutine function that adds a demon through the regular create path."""

    async def _add_demon(name: str, position: int, requirement: int = 50, **kwargs):
        data = PostDemon(
            name=name,
            position=position,
            requirement=requirement,
            verifier=kwargs.pop("verifier", "Verifier"),
            publisher=kwargs.pop("publisher", "Publisher"),
            difficulty=kwargs.pop("difficulty", "extreme"),
            **kwargs,
        )
        return await create_demon(data)

    return _add_demon
