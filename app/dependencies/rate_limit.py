"""Shared slowapi limiter for login and like endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Defaults; create_app() overwrites these from config["rate_limit"]
LIMITS = {"login": "10/minute", "likes": "30/minute"}


def login_limit() -> str:
    return LIMITS["login"]


def likes_limit() -> str:
    return LIMITS["likes"]


def configure(config: dict):
    rl_cfg = config.get("rate_limit", {})
    limiter.enabled = rl_cfg.get("enabled", True)
    LIMITS["login"] = rl_cfg.get("login", LIMITS["login"])
    LIMITS["likes"] = rl_cfg.get("likes", LIMITS["likes"])
