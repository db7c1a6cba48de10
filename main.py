"""
Room Chat Backend Application Entry Point.
"""
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.chat.connection_manager import ConnectionRegistry
from app.chat.gateway import ConnectionGateway
from app.core.config import settings
from app.core.database import engine, check_connection
from app.core.middleware import SessionMiddleware
from app.router.endpoints import api_router
import logging
import uvicorn

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting application...")

    from app.session import init_redis, is_initialized
    if not is_initialized():
        try:
            init_redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                session_ttl=settings.SESSION_TTL
            )
        except Exception as e:
            logger.error(f"Redis initialization failed: {e}")

    if check_connection():
        logger.info("Database connection OK")
        # Auto-create tables in debug mode (use Alembic migrations in production)
        if settings.DEBUG:
            from app.core.database import Base
            from app import model  # noqa: F401 (registers tables)
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (DEBUG mode)")

    if not settings.use_s3:
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)

    yield

    logger.info("Shutting down...")
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
)

# One registry per process: the gateway owns it, the relay publishes through it
app.state.gateway = ConnectionGateway(
    ConnectionRegistry(
        queue_size=settings.RELAY_QUEUE_SIZE,
        dedup_window=settings.RELAY_DEDUP_WINDOW,
    )
)

# Session middleware
app.add_middleware(SessionMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(api_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "database": "connected" if check_connection() else "disconnected",
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
