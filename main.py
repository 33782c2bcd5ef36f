"""
Entry point for the Blog Posts API
"""

import logging

import uvicorn

from blog_api.app import app
from blog_api.config.settings import DATABASE_URL, HOST, LOG_LEVEL, PORT

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logger.info(f"Starting Blog Posts API on port {PORT} ({DATABASE_URL.split('://', 1)[0]} store)")
    uvicorn.run(app, host=HOST, port=PORT)
