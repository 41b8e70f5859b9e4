"""
Configuration settings for the Postboard backend
"""

import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./postboard.db"

# Environment configuration
ENV = os.getenv("ENV", "DEV")  # DEV, QA or PROD
DATABASE_URL = os.getenv("DATABASE_URL")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Client data layer configuration
API_BASE_URL = os.getenv("API_BASE_URL", f"http://localhost:{PORT}")
QUERY_STALE_SECONDS = float(os.getenv("QUERY_STALE_SECONDS", 60))
LOCAL_STORAGE_PATH = os.getenv("LOCAL_STORAGE_PATH", ".postboard-storage.json")

logger.info(f"Environment: {ENV}")

if not DATABASE_URL:
    logger.warning(f"DATABASE_URL not set - falling back to {DEFAULT_DATABASE_URL}")
    DATABASE_URL = DEFAULT_DATABASE_URL

# CORS settings
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]
