"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from userapi.api.errors import register_exception_handlers
from userapi.api.v1 import health
from userapi.api.v1 import router as v1_router
from userapi.core.config import settings
from userapi.core.database import SessionLocal, init_db
from userapi.schemas.health import RootResponse
from userapi.services.seed import ensure_seed_admin

APP_VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Create tables if needed and make sure the seed admin exists."""
    init_db()
    db = SessionLocal()
    try:
        ensure_seed_admin(db, settings)
    finally:
        db.close()
    logger.info("User API started (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="User API",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS if not settings.is_production else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(v1_router, prefix=settings.API_PREFIX)


@app.get("/", response_model=RootResponse)
def root() -> RootResponse:
    """Root route; minimal payload for discovery."""
    return RootResponse(
        message="Welcome to User API",
        version=APP_VERSION,
        documentation="/docs",
        health="/health",
    )
