"""
kudos.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn kudos.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from kudos.api.auth import router as auth_router  # noqa: E402
from kudos.api.deps import get_config, get_engine  # noqa: E402
from kudos.api.routes.badges import router as badges_router  # noqa: E402
from kudos.api.routes.communities import router as communities_router  # noqa: E402
from kudos.api.routes.posts import router as posts_router  # noqa: E402
from kudos.api.routes.users import router as users_router  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine and config."""
    engine = get_engine()
    cfg = get_config()
    logger.info(
        "Kudos API started — %s, engine ready (%s)", cfg.community_name, engine.url.database,
    )
    yield
    logger.info("Kudos API shutting down")


app = FastAPI(
    title="Kudos API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(badges_router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(communities_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
