"""
Database connection management
"""

import logging
from typing import Optional

from blog_api.config.settings import DB_COMMAND_TIMEOUT, DB_POOL_MAX_SIZE, DB_POOL_MIN_SIZE
from blog_api.database.base import DocumentDatabase

logger = logging.getLogger(__name__)

# Global database handle
db: Optional[DocumentDatabase] = None


def create_database(database_url: str) -> DocumentDatabase:
    """
    Build a document database for the given URL

    Supported schemes:
        memory://                 in-process store
        postgres:// postgresql:// asyncpg-backed JSONB store
    """
    scheme = database_url.split("://", 1)[0].lower() if "://" in database_url else ""

    if scheme == "memory":
        from blog_api.database.memory import MemoryDatabase

        return MemoryDatabase()

    if scheme in ("postgres", "postgresql"):
        from blog_api.database.postgres import PostgresDatabase

        return PostgresDatabase(
            database_url,
            min_size=DB_POOL_MIN_SIZE,
            max_size=DB_POOL_MAX_SIZE,
            command_timeout=DB_COMMAND_TIMEOUT,
        )

    raise ValueError(f"Unsupported database URL scheme: {scheme or database_url!r}")


async def init_database(database_url: str) -> DocumentDatabase:
    """Open the global database; a second call replaces the first handle"""
    global db
    if db is not None:
        await close_database()

    database = create_database(database_url)
    await database.connect()
    db = database
    return db


async def close_database():
    """Close the global database handle"""
    global db
    if db is not None:
        await db.close()
        db = None


def get_database() -> Optional[DocumentDatabase]:
    """Get the database instance"""
    return db
