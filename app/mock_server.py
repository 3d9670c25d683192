"""
app/mock_server.py — Database-free development server
======================================================
Serves fixture portfolio data from data/mock_portfolio.yaml under /api so the
frontend can run without MongoDB. Likes are counted in memory.

Routes:
  GET  /api/ping
  GET  /api/portfolio                   → the whole fixture
  GET  /api/about
  GET  /api/skills | getskills | getskillcomponents
  GET  /api/projects | getprojects      GET /api/getprojects/{projectLink}
  GET  /api/experience | getexperiences
  GET  /api/involvements | getinvolvements   GET /api/getinvolvements/{involvementLink}
  GET  /api/honors | gethonors          GET /api/gethonors/{honorLink}
  GET  /api/must-load-images | dynamic-images | github-stats/top-langs
  POST /api/addLike                     {type, id} where id is the item's link
  GET  /health

Run:
  python -m app.mock_server
"""

import copy
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_FILE = ROOT / "data" / "mock_portfolio.yaml"

# like type → (fixture section, link field, label)
LIKE_SECTIONS = {
    "project": ("projects", "projectLink", "Project"),
    "involvement": ("involvements", "involvementLink", "Involvement"),
    "experience": ("experience", "experienceLink", "Experience"),
}


class MockLikeRequest(BaseModel):
    type: Optional[str] = None
    id: Optional[str] = None


def load_fixture(path: Optional[Path] = None) -> dict:
    path = Path(path or DEFAULT_DATA_FILE)
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _not_found(label: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"{label} not found"})


def _find(items: list, field: str, value: str) -> Optional[dict]:
    return next((item for item in items if item.get(field) == value), None)


def build_router(data: dict) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["Mock"])

    def section(name: str):
        async def endpoint():
            return data.get(name, [])
        return endpoint

    def by_link(name: str, field: str, label: str):
        async def endpoint(link: str):
            item = _find(data.get(name, []), field, link)
            return item if item is not None else _not_found(label)
        return endpoint

    @router.get("/ping")
    async def ping():
        return {"message": "Server is running!", "status": "success"}

    @router.get("/portfolio")
    async def portfolio():
        return {key: data.get(key) for key in ("about", "skills", "projects", "involvements", "experience", "honors")}

    router.add_api_route("/about", section("about"), methods=["GET"])
    for path in ("/skills", "/getskills", "/getskillcomponents"):
        router.add_api_route(path, section("skills"), methods=["GET"])
    for path in ("/projects", "/getprojects"):
        router.add_api_route(path, section("projects"), methods=["GET"])
    for path in ("/experience", "/getexperiences"):
        router.add_api_route(path, section("experience"), methods=["GET"])
    for path in ("/involvements", "/getinvolvements"):
        router.add_api_route(path, section("involvements"), methods=["GET"])
    for path in ("/honors", "/gethonors"):
        router.add_api_route(path, section("honors"), methods=["GET"])

    router.add_api_route("/getprojects/{link}", by_link("projects", "projectLink", "Project"), methods=["GET"])
    router.add_api_route(
        "/getinvolvements/{link}", by_link("involvements", "involvementLink", "Involvement"), methods=["GET"]
    )
    router.add_api_route("/gethonors/{link}", by_link("honors", "honorLink", "Honor"), methods=["GET"])

    router.add_api_route("/must-load-images", section("must_load_images"), methods=["GET"])
    router.add_api_route("/dynamic-images", section("dynamic_images"), methods=["GET"])

    @router.get("/github-stats/top-langs")
    async def top_langs():
        return data.get("top_langs", {})

    @router.post("/addLike")
    async def add_like(body: MockLikeRequest):
        if body.type not in LIKE_SECTIONS:
            return JSONResponse(status_code=400, content={"error": "Invalid type"})
        name, field, label = LIKE_SECTIONS[body.type]
        item = _find(data.get(name, []), field, body.id)
        if item is None:
            return _not_found(label)
        item["likesCount"] = (item.get("likesCount") or 0) + 1
        return {"success": True, "likesCount": item["likesCount"]}

    return router


def create_mock_app(data: Optional[dict] = None, config: Optional[dict] = None) -> FastAPI:
    """Build the mock server around a private copy of *data* (fixture file by default)."""
    config = config or {}
    mock_cfg = config.get("mock_server", {})
    if data is None:
        data_file = mock_cfg.get("data_file")
        data = load_fixture(ROOT / data_file if data_file else None)

    app = FastAPI(title="Portfolio Mock Server", version="1.0.0", redoc_url=None)
    app.state.data = copy.deepcopy(data)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("security", {}).get(
            "cors_origins", ["http://localhost:3000", "http://localhost:3001"]
        ),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    app.include_router(build_router(app.state.data))

    @app.get("/health")
    async def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


if __name__ == "__main__":
    import uvicorn

    from config_loader import load_config

    logging.basicConfig(level=logging.INFO)
    cfg = load_config(root=ROOT)
    port = int(cfg.get("mock_server", {}).get("port", 5002))
    logger.info(f"Simple portfolio server running on port {port}")
    uvicorn.run(create_mock_app(config=cfg), host="0.0.0.0", port=port, log_level="info")
