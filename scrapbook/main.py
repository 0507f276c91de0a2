"""Scrapbook Events Server - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrapbook.api.errors import register_exception_handlers
from scrapbook.config import settings
from scrapbook.database import init_db
from scrapbook.middleware import RequestContextMiddleware
from scrapbook.utils import media_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and point the media client at Cloudinary."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    init_db()
    media_storage.configure()
    logger.info("%s started (%s)", settings.app_name, settings.environment)

    yield

    logger.info("%s shutting down", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Event photo sharing: events, membership and media galleries",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

# --- Register API routers ---
from scrapbook.api.auth import router as auth_router  # noqa: E402
from scrapbook.api.events import router as events_router  # noqa: E402
from scrapbook.api.images import media_router, router as images_router  # noqa: E402
from scrapbook.api.users import router as users_router  # noqa: E402

API_PREFIX = "/api"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(events_router, prefix=API_PREFIX)
app.include_router(media_router, prefix=API_PREFIX)
app.include_router(images_router, prefix=API_PREFIX)


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
