"""
config_loader.py — Unified configuration loader
================================================
Merges config.yaml (shipped defaults) and config.local.yaml (deployment
overrides) into a single dict, then lets a handful of environment variables
win over both. A .env file in the project root is loaded first so local
development can keep secrets out of the YAML files.

Precedence (lowest → highest):
  config.yaml  <  config.local.yaml  <  environment variables
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

CONFIG_FILES = ("config.yaml", "config.local.yaml")

# env var → (section, key, caster)
ENV_OVERRIDES = {
    "MONGO_URI":     ("mongo", "uri", str),
    "MONGO_DB_NAME": ("mongo", "db_name", str),
    "JWT_SECRET":    ("auth", "jwt_secret", str),
    "GITHUB_TOKEN":  ("github", "token", str),
    "PORT":          ("server", "port", int),
}


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(config: dict, environ=None) -> dict:
    """Overlay the supported environment variables onto *config*."""
    environ = os.environ if environ is None else environ
    for var, (section, key, caster) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            config.setdefault(section, {})[key] = caster(value)

    cors = environ.get("CORS_ORIGINS")
    if cors:
        origins = [o.strip() for o in cors.split(",") if o.strip()]
        config.setdefault("security", {})["cors_origins"] = origins
    return config


def load_config(root: Path | str | None = None, environ=None) -> dict:
    """
    Load and merge config.yaml + config.local.yaml, then apply env overrides.

    Args:
        root: Project root directory. Defaults to the directory containing
              this file (i.e. the project root).
        environ: Mapping used for overrides. Defaults to os.environ.

    Returns:
        Merged configuration dict.
    """
    if root is None:
        root = Path(__file__).parent
    root = Path(root)

    env_file = root / ".env"
    if environ is None and env_file.exists():
        load_dotenv(env_file)

    merged: dict = {}
    for name in CONFIG_FILES:
        path = root / name
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, data)

    return apply_env_overrides(merged, environ)
