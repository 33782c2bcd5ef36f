"""
Shared pytest fixtures: a fresh document database per test and an
in-process HTTP client bound to the FastAPI app.

TEST_DATABASE_URL selects the backend (memory:// by default,
postgresql://... to run the same suite against PostgreSQL).
"""

from typing import AsyncGenerator

import httpx
import pytest_asyncio

from blog_api.app import app
from blog_api.config.settings import TEST_DATABASE_URL
from blog_api.database.base import DocumentDatabase
from blog_api.database.connection import close_database, init_database


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[DocumentDatabase, None]:
    """Open the test database, start from an empty store, close afterwards"""
    db = await init_database(TEST_DATABASE_URL)
    await db.drop_database()
    yield db
    await close_database()


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
