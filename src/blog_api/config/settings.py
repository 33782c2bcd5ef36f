"""
Configuration settings for the Blog Posts API
"""

import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD, QA or DEV
DATABASE_URL = os.getenv("DATABASE_URL", "memory://")
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "memory://")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Connection pool sizing (PostgreSQL backend only)
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# Validate environment variables
if DB_POOL_MIN_SIZE < 0 or DB_POOL_MAX_SIZE < 1 or DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
    raise ValueError(
        f"Invalid pool sizing: DB_POOL_MIN_SIZE={DB_POOL_MIN_SIZE}, DB_POOL_MAX_SIZE={DB_POOL_MAX_SIZE}"
    )
if LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
    raise ValueError(f"Invalid LOG_LEVEL: {LOG_LEVEL}")

if DATABASE_URL.startswith("memory://") and ENV == "PROD":
    logger.warning("DATABASE_URL not set - using in-memory document store, data will not persist")
