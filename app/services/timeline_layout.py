"""
app/services/timeline_layout.py — Canvas timeline geometry
===========================================================

The admin canvas editor stores each timeline card's top-left `position` and a
list of `connections` to other cards:

    {
      "targetId": "<_id of the other card>",
      "fromPoint": {"side": "right", "offset": 60},
      "toPoint":   {"side": "left",  "offset": 30},
      "controlPoint1": {"x": ..., "y": ...},   # optional
      "controlPoint2": {"x": ..., "y": ...},   # optional
    }

Cards are CARD_WIDTH x CARD_HEIGHT. Anchors sit at 25/50/75% of the height
on the left and right edges and at 33/66% of the width on the top and bottom
edges. Curves are cubic beziers whose control points sit one third and two
thirds of the way along x, at the start and end heights respectively.

This module mirrors that geometry so the API can hand out ready-to-draw paths
and validate edits, and it sorts timeline events for the public page.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

CARD_WIDTH = 280
CARD_HEIGHT = 120

SIDES = ("left", "right", "top", "bottom")
VERTICAL_OFFSETS = (CARD_HEIGHT * 0.25, CARD_HEIGHT * 0.5, CARD_HEIGHT * 0.75)
HORIZONTAL_OFFSETS = (CARD_WIDTH * 0.33, CARD_WIDTH * 0.66)

QUARTER_ORDER = {"Q4": 4, "Q3": 3, "Q2": 2, "Q1": 1}
DEFAULT_POSITION = {"x": 0, "y": 0}

Point = Tuple[float, float]


class InvalidConnection(ValueError):
    """Invalid connection edit (self-link, bad side, bad index)."""


def anchor_points() -> List[Dict[str, float]]:
    """All anchor descriptors a card exposes, in editor order."""
    points = [{"side": "left", "offset": o} for o in VERTICAL_OFFSETS]
    points += [{"side": "right", "offset": o} for o in VERTICAL_OFFSETS]
    points += [{"side": "top", "offset": o} for o in HORIZONTAL_OFFSETS]
    points += [{"side": "bottom", "offset": o} for o in HORIZONTAL_OFFSETS]
    return points


def _xy(position: Optional[dict]) -> Point:
    position = position or DEFAULT_POSITION
    return float(position.get("x", 0)), float(position.get("y", 0))


def resolve_point(position: Optional[dict], point: Optional[dict], legacy_side: Optional[str] = None) -> Point:
    """
    Absolute canvas coordinates of an anchor on a card at *position*.

    Without a stored point the legacy rule applies: right edge when
    legacy_side == "right", else left edge, at mid-height (y + 60).
    """
    x, y = _xy(position)
    if not point:
        return (x + CARD_WIDTH if legacy_side == "right" else x, y + CARD_HEIGHT / 2)

    side, offset = point.get("side"), float(point.get("offset", 0))
    if side == "left":
        return x, y + offset
    if side == "right":
        return x + CARD_WIDTH, y + offset
    if side == "top":
        return x + offset, y
    if side == "bottom":
        return x + offset, y + CARD_HEIGHT
    raise InvalidConnection(f"Unknown side: {side!r}")


def bezier_controls(start: Point, end: Point) -> Tuple[Point, Point]:
    (sx, sy), (ex, _ey) = start, end
    return (sx + (ex - sx) / 3, sy), (sx + 2 * (ex - sx) / 3, end[1])


def _fmt(value: float) -> str:
    return f"{value:g}"


def svg_path(start: Point, cp1: Point, cp2: Point, end: Point) -> str:
    return (
        f"M {_fmt(start[0])} {_fmt(start[1])} "
        f"C {_fmt(cp1[0])} {_fmt(cp1[1])}, {_fmt(cp2[0])} {_fmt(cp2[1])}, "
        f"{_fmt(end[0])} {_fmt(end[1])}"
    )


def connection_geometry(source: dict, target: dict, conn: dict) -> dict:
    start = resolve_point(source.get("position"), conn.get("fromPoint"), conn.get("fromSide"))
    end = resolve_point(target.get("position"), conn.get("toPoint"), conn.get("toSide"))
    default_cp1, default_cp2 = bezier_controls(start, end)
    cp1 = _xy(conn["controlPoint1"]) if conn.get("controlPoint1") else default_cp1
    cp2 = _xy(conn["controlPoint2"]) if conn.get("controlPoint2") else default_cp2
    return {
        "start": {"x": start[0], "y": start[1]},
        "end": {"x": end[0], "y": end[1]},
        "controlPoint1": {"x": cp1[0], "y": cp1[1]},
        "controlPoint2": {"x": cp2[0], "y": cp2[1]},
        "path": svg_path(start, cp1, cp2, end),
    }


def build_layout(events: Iterable[dict]) -> List[dict]:
    """
    Cards plus their drawable connections. Connections whose targetId does
    not match any event are skipped (no referential integrity is enforced).
    """
    events = list(events)
    by_id = {str(e.get("_id")): e for e in events}
    layout = []
    for event in events:
        paths = []
        for index, conn in enumerate(event.get("connections") or []):
            if not isinstance(conn, dict):
                continue
            target = by_id.get(str(conn.get("targetId")))
            if target is None:
                continue
            paths.append({
                "index": index,
                "targetId": str(conn.get("targetId")),
                **connection_geometry(event, target, conn),
            })
        layout.append({
            "_id": event.get("_id"),
            "title": event.get("title"),
            "position": event.get("position") or dict(DEFAULT_POSITION),
            "connections": paths,
        })
    return layout


def connect(source: dict, target: dict, from_point: Optional[dict] = None, to_point: Optional[dict] = None) -> List[dict]:
    """
    Return source's connections with a new link to *target* appended.

    Both sides are always stored: the side of the given anchor, or without
    one the facing edges of the two cards (source right and target left when
    the source sits further left, mirrored otherwise). The default bezier
    control points are stored alongside.
    """
    if str(source.get("_id")) == str(target.get("_id")):
        raise InvalidConnection("Cannot connect a card to itself")
    for point in (from_point, to_point):
        if point and point.get("side") not in SIDES:
            raise InvalidConnection(f"Unknown side: {point.get('side')!r}")

    sx, _ = _xy(source.get("position"))
    tx, _ = _xy(target.get("position"))
    left_to_right = sx < tx
    from_side = from_point["side"] if from_point else ("right" if left_to_right else "left")
    to_side = to_point["side"] if to_point else ("left" if left_to_right else "right")

    start = resolve_point(source.get("position"), from_point, from_side)
    end = resolve_point(target.get("position"), to_point, to_side)
    cp1, cp2 = bezier_controls(start, end)

    conn = {
        "targetId": str(target.get("_id")),
        "fromSide": from_side,
        "toSide": to_side,
        "fromPoint": dict(from_point) if from_point else None,
        "toPoint": dict(to_point) if to_point else None,
        "controlPoint1": {"x": cp1[0], "y": cp1[1]},
        "controlPoint2": {"x": cp2[0], "y": cp2[1]},
    }
    return list(source.get("connections") or []) + [conn]


def disconnect(event: dict, index: int) -> List[dict]:
    connections = list(event.get("connections") or [])
    if not 0 <= index < len(connections):
        raise InvalidConnection(f"No connection at index {index}")
    del connections[index]
    return connections


# --- ordering ---

def sort_events(events: Iterable[dict]) -> List[dict]:
    """Newest year first; within a year Q4 → Q1."""
    def key(event):
        return (-_year(event.get("year")), -QUARTER_ORDER.get(event.get("quarter"), 0))
    return sorted(events, key=key)


def _year(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def timeline_years(events: Iterable[dict], today: Optional[date] = None) -> List[str]:
    """Distinct years newest first; the current year is labelled 'Current'."""
    current = (today or date.today()).year
    years = sorted({_year(e.get("year")) for e in events if e.get("year") is not None}, reverse=True)
    return ["Current" if y == current else str(y) for y in years]
