"""
app/routers/content.py — Portfolio content CRUD
================================================

Routes (one block per resource in db.collections.RESOURCES):
  GET    /get<plural>              → cached list of active documents
  GET    /get<plural>/{link}       → single active document by link slug (if linkable)
  POST   /add<key>                 → insert, returns newItem with _id         (admin)
  PUT    /update<key>/{id}         → $set body minus _id                      (admin)
  DELETE /delete<key>/{id}         → soft delete (deleted: true)              (admin)

Plus:
  POST   /addLike                  → increment likesCount by {type, title}
  POST   /reorder                  → bulk-set `order` for {collection, items} (admin)
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import BaseModel

from app.dependencies.access_control import require_admin
from app.dependencies.rate_limit import likes_limit, limiter
from app.dependencies.services import get_content
from app.services.content import ContentService, UnknownLikeType
from db.collections import HONORS, REORDERABLE, RESOURCES, Resource
from db.mongo import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Content"])


class LikeRequest(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None


class ReorderRequest(BaseModel):
    collection: Optional[str] = None
    items: Optional[Any] = None


def _not_found(resource: Resource) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{resource.key} not found")


def register_resource(router: APIRouter, resource: Resource):
    """Attach the list/get/add/update/delete routes for *resource*."""
    name = resource.collection

    async def list_items(content: ContentService = Depends(get_content)):
        return to_jsonable(content.get_cached_all(name))

    router.add_api_route(
        f"/get{resource.plural}", list_items, methods=["GET"],
        summary=f"List {resource.label} entries",
    )

    if resource.link_field:
        async def get_by_link(link: str, content: ContentService = Depends(get_content)):
            doc = content.get_by_link(name, resource.link_field, link)
            if doc is None:
                raise _not_found(resource)
            return to_jsonable(doc)

        router.add_api_route(
            f"/get{resource.plural}/{{link}}", get_by_link, methods=["GET"],
            summary=f"Get one {resource.label} by {resource.link_field}",
        )

    async def add_item(
        body: dict = Body(...),
        content: ContentService = Depends(get_content),
        _admin=Depends(require_admin),
    ):
        new_item = content.add(name, body)
        logger.info(f"Added {resource.key} {new_item['_id']}")
        return {
            "success": True,
            "message": f"{resource.label} added.",
            "newItem": to_jsonable(new_item),
        }

    async def update_item(
        id: str,
        body: dict = Body(...),
        content: ContentService = Depends(get_content),
        _admin=Depends(require_admin),
    ):
        if not content.update(name, id, body):
            raise _not_found(resource)
        return {"success": True, "message": f"{resource.label} updated."}

    async def delete_item(
        id: str,
        content: ContentService = Depends(get_content),
        _admin=Depends(require_admin),
    ):
        if not content.soft_delete(name, id):
            raise _not_found(resource)
        logger.info(f"Soft deleted {resource.key} {id}")
        return {"success": True, "message": f"{resource.label} soft deleted."}

    router.add_api_route(f"/add{resource.key}", add_item, methods=["POST"],
                         summary=f"Add a {resource.label}")
    router.add_api_route(f"/update{resource.key}/{{id}}", update_item, methods=["PUT"],
                         summary=f"Update a {resource.label}")
    router.add_api_route(f"/delete{resource.key}/{{id}}", delete_item, methods=["DELETE"],
                         summary=f"Soft delete a {resource.label}")


for _resource in RESOURCES:
    register_resource(router, _resource)


@router.get("/gethonors", summary="Alias of /gethonorsexperiences")
async def list_honors(content: ContentService = Depends(get_content)):
    return to_jsonable(content.get_cached_all(HONORS))


# ============================================================================
# LIKES
# ============================================================================

@router.post("/addLike", summary="Increment likesCount on a titled item")
@limiter.limit(likes_limit)
async def add_like(request: Request, body: LikeRequest, content: ContentService = Depends(get_content)):
    if not body.type or not body.title:
        raise HTTPException(status_code=400, detail="Both 'type' and 'title' are required.")
    try:
        modified = content.add_like(body.type, body.title)
    except UnknownLikeType:
        raise HTTPException(status_code=400, detail="Invalid type provided.")
    if not modified:
        raise HTTPException(status_code=404, detail="Document not found or cannot be updated.")
    return {"success": True, "message": "Like added successfully."}


# ============================================================================
# REORDER
# ============================================================================

@router.post("/reorder", summary="Persist drag-and-drop order")
async def reorder_items(
    body: ReorderRequest,
    content: ContentService = Depends(get_content),
    _admin=Depends(require_admin),
):
    if not body.collection or body.items is None or not isinstance(body.items, list):
        raise HTTPException(status_code=400, detail="Invalid request format")
    if body.collection not in REORDERABLE:
        raise HTTPException(status_code=400, detail=f"Unknown collection: {body.collection}")

    items: List[dict] = []
    for item in body.items:
        if not isinstance(item, dict) or "_id" not in item or "order" not in item:
            raise HTTPException(status_code=400, detail="Each item needs _id and order")
        items.append(item)

    content.reorder(body.collection, items)
    return {"success": True, "message": "Order updated successfully"}
