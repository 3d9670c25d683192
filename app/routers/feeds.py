"""
app/routers/feeds.py — Feed posts
==================================

Endpoints:
  GET    /getFeeds           → cached feed list
  POST   /addFeed            → requires feedTitle + feedCategory   (admin)
  PUT    /updateFeed/{id}    → $set body minus _id                 (admin)
  DELETE /deleteFeed/{id}    → hard delete (the only one)          (admin)
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends, HTTPException

from app.dependencies.access_control import require_admin
from app.dependencies.services import get_content
from app.services.content import ContentService
from db.collections import FEEDS
from db.mongo import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Feeds"])


@router.get("/getFeeds")
async def get_feeds(content: ContentService = Depends(get_content)):
    return to_jsonable(content.get_cached_all(FEEDS))


@router.post("/addFeed")
async def add_feed(
    body: dict = Body(...),
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    title, category = body.get("feedTitle"), body.get("feedCategory")
    if not title or not category:
        raise HTTPException(status_code=400, detail="feedTitle and feedCategory are required.")

    new_feed = {
        "feedTitle": title,
        "feedCategory": category,
        "feedContent": body.get("feedContent") or [],
        "feedImageURL": body.get("feedImageURL") or None,
        "feedLinks": body.get("feedLinks") or [],
        "feedCreatedAt": datetime.now(timezone.utc).isoformat(),
    }
    new_item = content.add(FEEDS, new_feed)
    logger.info(f"Added feed {new_item['_id']} ({category})")
    return {
        "success": True,
        "message": "Feed added successfully.",
        "newItem": to_jsonable(new_item),
    }


@router.put("/updateFeed/{id}")
async def update_feed(
    id: str,
    body: dict = Body(...),
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    if not content.update(FEEDS, id, body):
        raise HTTPException(status_code=404, detail="feed not found")
    return {"success": True, "message": "Feed updated."}


@router.delete("/deleteFeed/{id}")
async def delete_feed(
    id: str,
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    if not content.hard_delete(FEEDS, id):
        raise HTTPException(status_code=404, detail="feed not found")
    logger.info(f"Deleted feed {id}")
    return {"success": True, "message": "Feed deleted."}
