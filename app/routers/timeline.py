"""
app/routers/timeline.py — Journey timeline events
==================================================

Endpoints:
  GET    /timeline                         → events, newest year first, Q4 → Q1
  GET    /timeline/years                   → ["Current", "2024", ...]
  GET    /timeline/layout                  → cards + ready-to-draw bezier paths
  GET    /timeline/anchors                 → the anchor descriptors a card exposes
  POST   /timeline                         → create (admin)
  PUT    /timeline/{id}                    → update, stamps updatedAt (admin)
  DELETE /timeline/{id}                    → soft delete (admin)
  POST   /timeline/{id}/connections        → link to another card (admin)
  DELETE /timeline/{id}/connections/{idx}  → remove a link (admin)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from app.dependencies.access_control import require_admin
from app.dependencies.services import get_content
from app.services import timeline_layout
from app.services.content import ContentService
from app.services.timeline_layout import InvalidConnection
from db.collections import TIMELINE
from db.mongo import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timeline", tags=["Timeline"])


class ConnectRequest(BaseModel):
    targetId: str
    fromPoint: Optional[dict] = None
    toPoint: Optional[dict] = None


def _now():
    return datetime.now(timezone.utc)


def _find_active(content: ContentService, event_id: str) -> dict:
    target = str(event_id)
    for event in content.get_cached_all(TIMELINE):
        if str(event.get("_id")) == target:
            return event
    raise HTTPException(status_code=404, detail="Timeline event not found")


@router.get("")
async def get_timeline(content: ContentService = Depends(get_content)):
    events = content.get_cached_all(TIMELINE)
    return to_jsonable(timeline_layout.sort_events(events))


@router.get("/years")
async def get_timeline_years(content: ContentService = Depends(get_content)):
    return timeline_layout.timeline_years(content.get_cached_all(TIMELINE))


@router.get("/layout")
async def get_timeline_layout(content: ContentService = Depends(get_content)):
    return to_jsonable(timeline_layout.build_layout(content.get_cached_all(TIMELINE)))


@router.get("/anchors")
async def get_anchor_points():
    return {
        "card": {"width": timeline_layout.CARD_WIDTH, "height": timeline_layout.CARD_HEIGHT},
        "anchors": timeline_layout.anchor_points(),
    }


@router.post("")
async def add_timeline(
    body: dict = Body(...),
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    try:
        year = int(body.get("year"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="year must be an integer")

    now = _now()
    event = {
        **body,
        "year": year,
        "sortOrder": body.get("sortOrder") or 1,
        "connections": body.get("connections") or [],
        "position": body.get("position") or dict(timeline_layout.DEFAULT_POSITION),
        "isExpanded": False,
        "createdAt": now,
        "updatedAt": now,
    }
    new_item = content.add(TIMELINE, event)
    return {
        "success": True,
        "message": "Timeline event added successfully",
        "newItem": to_jsonable(new_item),
    }


@router.put("/{id}")
async def update_timeline(
    id: str,
    body: dict = Body(...),
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    fields = {**body, "updatedAt": _now()}
    if "year" in fields:
        try:
            fields["year"] = int(fields["year"])
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="year must be an integer")
    if not content.update(TIMELINE, id, fields):
        raise HTTPException(status_code=404, detail="Timeline event not found")
    return {"success": True, "message": "Timeline event updated successfully"}


@router.delete("/{id}")
async def delete_timeline(
    id: str,
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    if not content.soft_delete(TIMELINE, id, {"updatedAt": _now()}):
        raise HTTPException(status_code=404, detail="Timeline event not found")
    return {"success": True, "message": "Timeline event deleted successfully"}


@router.post("/{id}/connections")
async def add_connection(
    id: str,
    body: ConnectRequest,
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    source = _find_active(content, id)
    target = _find_active(content, body.targetId)
    try:
        connections = timeline_layout.connect(source, target, body.fromPoint, body.toPoint)
    except InvalidConnection as e:
        raise HTTPException(status_code=400, detail=str(e))
    content.update(TIMELINE, id, {"connections": connections, "updatedAt": _now()})
    return {"success": True, "connections": to_jsonable(connections)}


@router.delete("/{id}/connections/{index}")
async def remove_connection(
    id: str,
    index: int,
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    source = _find_active(content, id)
    try:
        connections = timeline_layout.disconnect(source, index)
    except InvalidConnection as e:
        raise HTTPException(status_code=400, detail=str(e))
    content.update(TIMELINE, id, {"connections": connections, "updatedAt": _now()})
    return {"success": True, "connections": to_jsonable(connections)}
