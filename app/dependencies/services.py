"""Request-scoped accessors for the services attached to app.state."""

from fastapi import Request

from app.services.content import ContentService
from app.services.github_stats import GithubStatsService
from app.services.images import ImageService
from db.repository import ContentRepository


def get_content(request: Request) -> ContentService:
    return request.app.state.content


def get_repo(request: Request) -> ContentRepository:
    return request.app.state.repo


def get_images(request: Request) -> ImageService:
    return request.app.state.images


def get_github(request: Request) -> GithubStatsService:
    return request.app.state.github


def get_config(request: Request) -> dict:
    return request.app.state.config
