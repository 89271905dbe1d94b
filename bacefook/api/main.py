"""
bacefook.api.main — FastAPI application entry point
====================================================

Run with::

    uvicorn bacefook.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from bacefook import __version__  # noqa: E402
from bacefook.api.deps import get_config, get_engine  # noqa: E402
from bacefook.api.routes.analytics import router as analytics_router  # noqa: E402
from bacefook.api.routes.users import router as users_router  # noqa: E402
from bacefook.config import configure_logging  # noqa: E402
from bacefook.errors import BacefookError  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — configure logging and warm the DB engine."""
    cfg = get_config()
    configure_logging(cfg.log_level)

    engine = get_engine()
    logger.info("%s started — engine ready (%s)", cfg.service_name, engine.url.database)
    yield
    logger.info("%s shutting down", cfg.service_name)


app = FastAPI(
    title="Bacefook API",
    version=__version__,
    lifespan=lifespan,
)


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


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Domain error → HTTP status
# ---------------------------------------------------------------------------
@app.exception_handler(BacefookError)
async def handle_domain_error(request: Request, exc: BacefookError) -> JSONResponse:
    logger.warning("%s %s → %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Analytics first: its fixed paths must shadow /users/{user_id}.
app.include_router(analytics_router, prefix="/api")
app.include_router(users_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
