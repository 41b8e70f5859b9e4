"""
Postboard Backend API Server
Posts and users behind a validate-then-persist pipeline
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS, ENV, LOG_LEVEL
from database.connection import init_database, close_database
from api.routes import health, posts, users
from utils.error_handling import setup_error_handling

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store before serving and dispose of it on shutdown"""
    logger.info(f"Starting Postboard backend ({ENV})")
    await init_database()
    try:
        yield
    finally:
        await close_database()


def create_app() -> FastAPI:
    """Build the API: CORS, error handling, then the resource routers"""
    application = FastAPI(
        title="Postboard Backend",
        description="Posts and users API",
        version="1.0.0",
        lifespan=lifespan
    )

    # Only list and create are exposed over HTTP
    application.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials="*" not in ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Trace-ID"],
    )

    setup_error_handling(application)

    application.include_router(health.router, tags=["Health"])
    application.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
    application.include_router(users.router, prefix="/api/users", tags=["Users"])
    return application


app = create_app()
