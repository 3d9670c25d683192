# Feed Tests
# Dependent files: app/routers/feeds.py

from bson import ObjectId

from db.collections import FEEDS


def test_add_feed_fills_defaults(admin_client):
    resp = admin_client.post("/addFeed", json={"feedTitle": "Launch", "feedCategory": "News"})
    assert resp.status_code == 200
    item = resp.json()["newItem"]
    assert item["feedContent"] == []
    assert item["feedLinks"] == []
    assert item["feedImageURL"] is None
    assert "feedCreatedAt" in item
    assert resp.json()["message"] == "Feed added successfully."


def test_add_feed_requires_title_and_category(admin_client):
    resp = admin_client.post("/addFeed", json={"feedTitle": "Launch"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "feedTitle and feedCategory are required."


def test_feed_lifecycle(admin_client, database):
    item = admin_client.post("/addFeed", json={"feedTitle": "A", "feedCategory": "Blog"}).json()["newItem"]
    assert [f["feedTitle"] for f in admin_client.get("/getFeeds").json()] == ["A"]

    resp = admin_client.put(f"/updateFeed/{item['_id']}", json={"feedTitle": "B"})
    assert resp.status_code == 200
    assert admin_client.get("/getFeeds").json()[0]["feedTitle"] == "B"

    resp = admin_client.delete(f"/deleteFeed/{item['_id']}")
    assert resp.status_code == 200
    assert database[FEEDS].count_documents({}) == 0
    assert admin_client.get("/getFeeds").json() == []


def test_delete_unknown_feed(admin_client):
    resp = admin_client.delete(f"/deleteFeed/{ObjectId()}")
    assert resp.status_code == 404
    assert resp.json()["message"] == "feed not found"


def test_feed_writes_require_admin(client):
    assert client.post("/addFeed", json={"feedTitle": "A", "feedCategory": "B"}).status_code == 401
