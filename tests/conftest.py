# Shared fixtures
# Builds the API on an in-memory mongomock database with a test config
# Dependent files: app/main.py, config_loader.py

import copy
import os
from pathlib import Path

import mongomock
import pytest
from starlette.testclient import TestClient

# Set env vars BEFORE importing app modules (app.main builds a module-level app)
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/PortfolioTestDB")

from app.dependencies.access_control import hash_secret
from app.main import create_app
from config_loader import load_config
from db.collections import ADMIN

ROOT = Path(__file__).resolve().parent.parent

ADMIN_USERNAME = "testadmin"
ADMIN_PASSWORD = "testpass123"


def _test_config() -> dict:
    config = copy.deepcopy(load_config(root=ROOT, environ={}))
    config["auth"].update({
        "jwt_secret": "test-secret-key-for-testing-only",
        "cookie_secure": False,
        "protect_writes": True,
        "bootstrap_username": "kale",
        "bootstrap_password": "bootstrap-pass",
    })
    config["rate_limit"]["enabled"] = False
    config["cache"]["background_refresh"] = False
    config["github"]["token"] = "gh-test-token"
    config["logging"] = {"level": "WARNING", "file": ""}
    return config


@pytest.fixture
def config():
    return _test_config()


@pytest.fixture
def database():
    return mongomock.MongoClient()["PortfolioTestDB"]


@pytest.fixture
def app(config, database):
    return create_app(config=config, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded_admin(database):
    database[ADMIN].insert_one({
        "userName": hash_secret(ADMIN_USERNAME),
        "password": hash_secret(ADMIN_PASSWORD),
    })


@pytest.fixture
def admin_client(client, seeded_admin):
    """Client holding a valid admin session cookie."""
    resp = client.post("/compareAdminPassword", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client
