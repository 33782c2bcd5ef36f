"""
Blog Posts API Server
CRUD over a single collection of blog posts backed by a document store.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blog_api.api.routes import health, posts
from blog_api.config.settings import ALLOWED_ORIGINS, DATABASE_URL
from blog_api.database.connection import close_database, get_database, init_database
from blog_api.utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database unless run_server already did, close only what we opened"""
    opened_here = get_database() is None
    if opened_here:
        await init_database(DATABASE_URL)
    yield
    if opened_here:
        await close_database()


# FastAPI app initialization
app = FastAPI(
    title="Blog Posts API",
    description="CRUD API for blog posts stored in a document database",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(posts.router, prefix="/posts", tags=["Posts"])
