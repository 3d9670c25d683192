# Timeline Tests
# Ordering, year labels, canvas geometry and the timeline routes
# Dependent files: app/services/timeline_layout.py, app/routers/timeline.py

from datetime import date

import pytest
from bson import ObjectId

from app.services import timeline_layout as tl
from db.collections import TIMELINE


# --- Ordering ---

def test_sort_events_newest_year_then_q4_first():
    events = [
        {"title": "a", "year": 2023, "quarter": "Q1"},
        {"title": "b", "year": 2024, "quarter": "Q2"},
        {"title": "c", "year": 2024, "quarter": "Q4"},
        {"title": "d", "year": 2023, "quarter": "Q3"},
    ]
    assert [e["title"] for e in tl.sort_events(events)] == ["c", "b", "d", "a"]


def test_timeline_years_labels_current():
    events = [{"year": 2022}, {"year": 2026}, {"year": "2024"}, {"year": 2022}]
    assert tl.timeline_years(events, today=date(2026, 3, 1)) == ["Current", "2024", "2022"]


# --- Geometry ---

def test_anchor_points():
    points = tl.anchor_points()
    assert len(points) == 10
    assert {"side": "left", "offset": 30.0} in points
    assert {"side": "right", "offset": 90.0} in points
    assert {"side": "top", "offset": pytest.approx(92.4)} in points


def test_resolve_point_each_side():
    pos = {"x": 100, "y": 50}
    assert tl.resolve_point(pos, {"side": "left", "offset": 30}) == (100, 80)
    assert tl.resolve_point(pos, {"side": "right", "offset": 60}) == (380, 110)
    assert tl.resolve_point(pos, {"side": "top", "offset": 140}) == (pytest.approx(192.4), 50)
    assert tl.resolve_point(pos, {"side": "bottom", "offset": 10}) == (110, 170)


def test_resolve_point_legacy_sides():
    pos = {"x": 0, "y": 0}
    assert tl.resolve_point(pos, None, "right") == (280, 60)
    assert tl.resolve_point(pos, None, None) == (0, 60)


def test_bezier_controls_thirds():
    cp1, cp2 = tl.bezier_controls((0, 0), (300, 90))
    assert cp1 == (100, 0)
    assert cp2 == (200, 90)


def test_connection_geometry_path():
    source = {"_id": "a", "position": {"x": 0, "y": 0}}
    target = {"_id": "b", "position": {"x": 400, "y": 0}}
    geo = tl.connection_geometry(source, target, {
        "targetId": "b",
        "fromPoint": {"side": "right", "offset": 60},
        "toPoint": {"side": "left", "offset": 60},
    })
    assert geo["path"] == "M 280 60 C 320 60, 360 60, 400 60"


def test_connection_geometry_keeps_stored_control_points():
    source = {"position": {"x": 0, "y": 0}}
    target = {"position": {"x": 400, "y": 0}}
    geo = tl.connection_geometry(source, target, {
        "fromSide": "right",
        "controlPoint1": {"x": 300, "y": -50},
        "controlPoint2": {"x": 350, "y": 150},
    })
    assert geo["controlPoint1"] == {"x": 300, "y": -50}
    assert geo["path"].startswith("M 280 60 C 300 -50, 350 150")


def test_build_layout_skips_unknown_targets():
    events = [
        {"_id": "a", "title": "A", "position": {"x": 0, "y": 0},
         "connections": [{"targetId": "b"}, {"targetId": "missing"}]},
        {"_id": "b", "title": "B", "position": {"x": 400, "y": 0}},
    ]
    layout = tl.build_layout(events)
    assert [len(card["connections"]) for card in layout] == [1, 0]
    assert layout[0]["connections"][0]["index"] == 0
    assert layout[1]["position"] == {"x": 400, "y": 0}


def test_connect_and_disconnect():
    source = {"_id": "a", "position": {"x": 0, "y": 0}, "connections": []}
    target = {"_id": "b", "position": {"x": 400, "y": 0}}
    connections = tl.connect(source, target)
    assert connections == [{
        "targetId": "b",
        "fromSide": "right",
        "toSide": "left",
        "fromPoint": None,
        "toPoint": None,
        "controlPoint1": {"x": 320.0, "y": 60.0},
        "controlPoint2": {"x": 360.0, "y": 60.0},
    }]
    assert source["connections"] == []

    assert tl.disconnect({"connections": connections}, 0) == []
    with pytest.raises(tl.InvalidConnection):
        tl.disconnect({"connections": connections}, 3)


def test_connect_right_to_left_ends_on_target_right_edge():
    source = {"_id": "a", "position": {"x": 600, "y": 0}}
    target = {"_id": "b", "position": {"x": 0, "y": 0}}
    conn = tl.connect(source, target)[0]
    assert (conn["fromSide"], conn["toSide"]) == ("left", "right")

    geo = tl.connection_geometry(source, target, conn)
    assert geo["start"] == {"x": 600.0, "y": 60.0}
    assert geo["end"] == {"x": 280.0, "y": 60.0}


def test_connect_with_anchor_stores_both_sides():
    source = {"_id": "a", "position": {"x": 600, "y": 0}}
    target = {"_id": "b", "position": {"x": 0, "y": 0}}
    conn = tl.connect(source, target, from_point={"side": "bottom", "offset": 140})[0]
    assert conn["fromSide"] == "bottom"
    assert conn["toSide"] == "right"
    assert conn["fromPoint"] == {"side": "bottom", "offset": 140}
    assert tl.connection_geometry(source, target, conn)["start"] == {"x": 740.0, "y": 120.0}


def test_connect_rejects_self_and_bad_side():
    card = {"_id": "a"}
    with pytest.raises(tl.InvalidConnection):
        tl.connect(card, card)
    with pytest.raises(tl.InvalidConnection):
        tl.connect(card, {"_id": "b"}, from_point={"side": "middle", "offset": 0})


# --- Routes ---

def _add_event(client, **fields):
    body = {"title": "Started BME", "year": 2024, "quarter": "Q3"}
    body.update(fields)
    resp = client.post("/timeline", json=body)
    assert resp.status_code == 200
    return resp.json()["newItem"]


def test_add_event_defaults(admin_client):
    item = _add_event(admin_client, year="2023")
    assert item["year"] == 2023
    assert item["sortOrder"] == 1
    assert item["connections"] == []
    assert item["position"] == {"x": 0, "y": 0}
    assert item["isExpanded"] is False
    assert "createdAt" in item and "updatedAt" in item


def test_add_event_rejects_bad_year(admin_client):
    resp = admin_client.post("/timeline", json={"title": "x", "year": "soon"})
    assert resp.status_code == 400


def test_list_years_and_layout(admin_client):
    a = _add_event(admin_client, title="A", year=2023, quarter="Q1", position={"x": 0, "y": 0})
    b = _add_event(admin_client, title="B", year=2024, quarter="Q2", position={"x": 400, "y": 0})

    assert [e["title"] for e in admin_client.get("/timeline").json()] == ["B", "A"]
    assert admin_client.get("/timeline/years").json()[-1] == "2023"

    resp = admin_client.post(f"/timeline/{a['_id']}/connections", json={
        "targetId": b["_id"],
        "fromPoint": {"side": "right", "offset": 60},
        "toPoint": {"side": "left", "offset": 60},
    })
    assert resp.status_code == 200
    assert len(resp.json()["connections"]) == 1

    layout = {card["title"]: card for card in admin_client.get("/timeline/layout").json()}
    assert layout["A"]["connections"][0]["path"] == "M 280 60 C 320 60, 360 60, 400 60"

    resp = admin_client.delete(f"/timeline/{a['_id']}/connections/0")
    assert resp.status_code == 200
    assert resp.json()["connections"] == []


def test_connect_leftward_card_serves_path_to_right_edge(admin_client):
    a = _add_event(admin_client, title="A", position={"x": 600, "y": 0})
    b = _add_event(admin_client, title="B", position={"x": 0, "y": 0})

    resp = admin_client.post(f"/timeline/{a['_id']}/connections", json={"targetId": b["_id"]})
    stored = resp.json()["connections"][0]
    assert (stored["fromSide"], stored["toSide"]) == ("left", "right")

    layout = {card["title"]: card for card in admin_client.get("/timeline/layout").json()}
    assert layout["A"]["connections"][0]["end"] == {"x": 280.0, "y": 60.0}


def test_connect_to_unknown_event(admin_client):
    a = _add_event(admin_client)
    resp = admin_client.post(f"/timeline/{a['_id']}/connections", json={"targetId": str(ObjectId())})
    assert resp.status_code == 404


def test_connect_to_self_is_400(admin_client):
    a = _add_event(admin_client)
    resp = admin_client.post(f"/timeline/{a['_id']}/connections", json={"targetId": a["_id"]})
    assert resp.status_code == 400


def test_update_and_soft_delete(admin_client, database):
    item = _add_event(admin_client)
    resp = admin_client.put(f"/timeline/{item['_id']}", json={"title": "Renamed", "year": "2025"})
    assert resp.status_code == 200
    stored = database[TIMELINE].find_one({"_id": ObjectId(item["_id"])})
    assert stored["title"] == "Renamed"
    assert stored["year"] == 2025

    assert admin_client.delete(f"/timeline/{item['_id']}").status_code == 200
    assert admin_client.get("/timeline").json() == []
    assert database[TIMELINE].find_one({"_id": ObjectId(item["_id"])})["deleted"] is True


def test_update_unknown_event(admin_client):
    assert admin_client.put(f"/timeline/{ObjectId()}", json={"title": "x"}).status_code == 404


def test_anchor_route(client):
    data = client.get("/timeline/anchors").json()
    assert data["card"] == {"width": 280, "height": 120}
    assert len(data["anchors"]) == 10
