"""
Posts API fixtures: every test starts from exactly SEED_COUNT seeded posts
"""

from typing import Any, Dict, List

import pytest
import pytest_asyncio

from blog_api.database.base import Collection
from blog_api.services.posts_service import BLOG_POSTS_COLLECTION

from data_factory import SEED_COUNT, DataFactory, tear_down_db


@pytest.fixture
def data_factory() -> DataFactory:
    return DataFactory()


@pytest_asyncio.fixture
async def blog_posts(database) -> Collection:
    """The blog posts collection, queried directly for store-side checks"""
    return database.collection(BLOG_POSTS_COLLECTION)


@pytest_asyncio.fixture(autouse=True)
async def seeded_posts(database, blog_posts, data_factory) -> List[Dict[str, Any]]:
    await tear_down_db(database)
    return await data_factory.seed_blog_data(blog_posts, SEED_COUNT)
