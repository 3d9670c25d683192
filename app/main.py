"""
app/main.py — Portfolio API Server
===================================
JSON API backing the portfolio site and its admin panel. Content lives in
MongoDB; every list route is served from an in-process cache that the write
routes invalidate.

Routers:
  app/routers/content.py   → /get*, /add*, /update*, /delete*, /addLike, /reorder
  app/routers/feeds.py     → /getFeeds, /addFeed, /updateFeed, /deleteFeed
  app/routers/timeline.py  → /timeline...
  app/routers/site.py      → /aboutme, /settings, /getCollectionCounts,
                             /github-stats/top-langs, /must-load-images,
                             /dynamic-images, /health
  app/routers/auth.py      → /compareAdminName, /compareAdminPassword, ...

Errors leave the server as {"message": "..."} with the matching status code.

Run:
  python -m app.main
  uvicorn app.main:app --host 0.0.0.0 --port 5000
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.dependencies import rate_limit
from app.dependencies.access_control import AuthSettings
from app.routers import auth, content, feeds, site, timeline
from app.services.content import ContentService
from app.services.github_stats import GithubStatsService
from app.services.images import ImageService
from app.services.scheduler import RefreshScheduler, daily_at_utc, every_interval
from db.cache import ContentCache
from db.mongo import InvalidObjectId, get_db
from db.repository import ContentRepository

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ─────────────────────────────────────────────────────────────────────────────
# CONFIG & LOGGING
# ─────────────────────────────────────────────────────────────────────────────

def load_config() -> dict:
    """Load config.yaml + config.local.yaml + env overrides from project root."""
    from config_loader import load_config as _load
    return _load(root=Path(__file__).parent.parent)


def configure_logging(config: dict):
    log_cfg = config.get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    log_file = log_cfg.get("file")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


# ─────────────────────────────────────────────────────────────────────────────
# ERROR HANDLERS
# ─────────────────────────────────────────────────────────────────────────────

async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def invalid_id_handler(request: Request, exc: InvalidObjectId):
    return JSONResponse(status_code=400, content={"message": str(exc)})


async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Database error"})


# ─────────────────────────────────────────────────────────────────────────────
# APP FACTORY
# ─────────────────────────────────────────────────────────────────────────────

def _lifespan_for(config: dict):
    cache_cfg = config.get("cache", {})
    github_cfg = config.get("github", {})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = RefreshScheduler()
        if cache_cfg.get("background_refresh", True):
            interval = float(cache_cfg.get("image_refresh_hours", 12)) * 3600
            images: ImageService = app.state.images
            scheduler.start(
                every_interval("must-load-images", images.refresh_must_load, interval),
                name="must-load-images",
            )
            scheduler.start(
                every_interval("dynamic-images", images.refresh_dynamic, interval),
                name="dynamic-images",
            )
            if github_cfg.get("schedule_enabled", False):
                github: GithubStatsService = app.state.github
                scheduler.start(
                    daily_at_utc("github-top-languages", github.refresh, int(github_cfg.get("refresh_hour_utc", 5))),
                    name="github-top-languages",
                )
        yield
        await scheduler.stop()

    return lifespan


def create_app(
    config: Optional[dict] = None,
    database: Optional[Database] = None,
    github_session: Optional[requests.Session] = None,
) -> FastAPI:
    """Build the API. Tests pass their own config and an in-memory database."""
    config = config if config is not None else load_config()
    configure_logging(config)

    app = FastAPI(
        title="Portfolio API",
        description="Content, timeline and admin API for the portfolio site.",
        version=APP_VERSION,
        lifespan=_lifespan_for(config),
        docs_url="/docs",
        redoc_url=None,
    )

    # Services
    db = database if database is not None else get_db(config)
    cache = ContentCache()
    repo = ContentRepository(db)
    app.state.config = config
    app.state.auth = AuthSettings.from_config(config)
    app.state.cache = cache
    app.state.repo = repo
    app.state.content = ContentService(repo, cache)
    app.state.images = ImageService(config, repo, cache)
    app.state.github = GithubStatsService(config, cache, session=github_session)

    # Rate limiting
    rate_limit.configure(config)
    app.state.limiter = rate_limit.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Errors
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(InvalidObjectId, invalid_id_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)

    # Middleware
    security_cfg = config.get("security", {})
    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=security_cfg.get("trusted_proxies", ["127.0.0.1", "::1"]),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=security_cfg.get("cors_origins", []),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routers
    prefix = config.get("server", {}).get("api_prefix", "") or ""
    for module in (content, feeds, timeline, site, auth):
        app.include_router(module.router, prefix=prefix)

    logger.info(f"Portfolio API initialized (db={db.name}, prefix='{prefix}')")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server_cfg = app.state.config.get("server", {})
    uvicorn.run(
        app,
        host=server_cfg.get("host", "0.0.0.0"),
        port=int(server_cfg.get("port", 5000)),
        log_level="info",
    )
