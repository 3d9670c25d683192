"""
app/routers/site.py — Site-wide sections and statistics
========================================================

Endpoints:
  GET /aboutme                  → about-me singleton (config default if empty)
  PUT /aboutme                  → upsert {aboutData, profileInfo}       (admin)
  GET /settings                 → resume URL + social links (config default if empty)
  PUT /settings                 → upsert {resumeURL, socialLinks}       (admin)
  GET /getCollectionCounts      → per-collection document counts (cached)
  GET /github-stats/top-langs   → top GitHub languages by byte share (cached)
  GET /must-load-images         → static preload list
  GET /dynamic-images           → first image of every active content item
  GET /health                   → liveness + database ping
"""

import copy
import logging
from datetime import datetime, timezone

import requests
from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from app.dependencies.access_control import require_admin
from app.dependencies.services import get_config, get_content, get_github, get_images, get_repo
from app.services.content import ContentService
from app.services.github_stats import GithubStatsError, GithubStatsService
from app.services.images import ImageService
from db.collections import ABOUT_ME, SETTINGS
from db.mongo import to_jsonable
from db.repository import ContentRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Site"])


def _defaults(config: dict, key: str) -> dict:
    return copy.deepcopy(config.get("defaults", {}).get(key, {}))


# ============================================================================
# ABOUT ME
# ============================================================================

@router.get("/aboutme")
async def get_about_me(
    content: ContentService = Depends(get_content),
    config: dict = Depends(get_config),
):
    docs = content.get_cached_all(ABOUT_ME)
    if docs:
        return to_jsonable(docs[0])
    return _defaults(config, "about_me")


@router.put("/aboutme")
async def update_about_me(
    body: dict = Body(...),
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    content.repo.replace_singleton(ABOUT_ME, {
        "aboutData": body.get("aboutData"),
        "profileInfo": body.get("profileInfo"),
        "updatedAt": datetime.now(timezone.utc),
    })
    content.invalidate(ABOUT_ME, counts=False)
    return {"success": True, "message": "About Me section updated successfully"}


# ============================================================================
# SETTINGS
# ============================================================================

@router.get("/settings")
async def get_settings(
    repo: ContentRepository = Depends(get_repo),
    config: dict = Depends(get_config),
):
    settings = repo.find_singleton(SETTINGS)
    if not settings:
        return _defaults(config, "settings")
    return to_jsonable(settings)


@router.put("/settings")
async def update_settings(
    body: dict = Body(...),
    repo: ContentRepository = Depends(get_repo),
    _admin=Depends(require_admin),
):
    repo.replace_singleton(SETTINGS, {
        "resumeURL": body.get("resumeURL"),
        "socialLinks": body.get("socialLinks"),
        "updatedAt": datetime.now(timezone.utc),
    })
    return {"success": True, "message": "Settings updated successfully"}


# ============================================================================
# STATISTICS
# ============================================================================

@router.get("/getCollectionCounts")
async def get_collection_counts(content: ContentService = Depends(get_content)):
    return content.collection_counts()


@router.get("/github-stats/top-langs")
async def get_top_languages(github: GithubStatsService = Depends(get_github)):
    try:
        return github.get_top_languages()
    except (GithubStatsError, requests.RequestException, KeyError, ValueError) as e:
        logger.error(f"Error aggregating GitHub language stats: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch and process GitHub language statistics"},
        )


# ============================================================================
# IMAGE PRELOAD LISTS
# ============================================================================

@router.get("/must-load-images")
async def get_must_load_images(images: ImageService = Depends(get_images)):
    return images.get_must_load()


@router.get("/dynamic-images")
async def get_dynamic_images(images: ImageService = Depends(get_images)):
    return images.get_dynamic()


# ============================================================================
# HEALTH
# ============================================================================

@router.get("/health")
async def health(request: Request, repo: ContentRepository = Depends(get_repo)):
    database = "connected"
    try:
        repo.db.command("ping")
    except Exception as e:
        logger.warning(f"Health check database ping failed: {e}")
        database = "unavailable"
    return {
        "status": "ok",
        "version": request.app.version,
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
