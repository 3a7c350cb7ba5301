from __future__ import annotations

from dataclasses import dataclass

from erd_editor.gui_kit.error_contract import editor_error

ENTITY = "ENTITY"
WEAK_ENTITY = "WEAK_ENTITY"
ATTRIBUTE = "ATTRIBUTE"
DERIVED_ATTRIBUTE = "DERIVED_ATTRIBUTE"
MULTI_VALUED_ATTRIBUTE = "MULTI_VALUED_ATTRIBUTE"
RELATIONSHIP = "RELATIONSHIP"

NODE_TYPES: tuple[str, ...] = (
    ENTITY,
    WEAK_ENTITY,
    ATTRIBUTE,
    DERIVED_ATTRIBUTE,
    MULTI_VALUED_ATTRIBUTE,
    RELATIONSHIP,
)

AFFORDANCE_DELETE = "delete"
AFFORDANCE_PRIMARY_KEY = "primary_key"
AFFORDANCE_CONNECT = "connect"
AFFORDANCE_RENAME = "rename"

AFFORDANCE_RADIUS = 10
AFFORDANCE_COLUMN_OFFSET = 125
CARDINALITY_HIT_RADIUS = 12

# (kind, dy) from the node's top-left anchor, top to bottom.
_AFFORDANCE_ROWS: tuple[tuple[str, int], ...] = (
    (AFFORDANCE_DELETE, -5),
    (AFFORDANCE_PRIMARY_KEY, 15),
    (AFFORDANCE_CONNECT, 35),
    (AFFORDANCE_RENAME, 55),
)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class ShapeSpec:
    """Geometry for one node type, relative to the node's top-left anchor."""

    display_label: str
    geometry: str
    body_dx: int
    body_dy: int
    body_width: int
    body_height: int
    anchor_dx: int
    anchor_dy: int


_BOX = dict(body_dx=0, body_dy=0, body_width=120, body_height=60, anchor_dx=60, anchor_dy=30)
_CIRCLE = dict(body_dx=10, body_dy=0, body_width=60, body_height=60, anchor_dx=40, anchor_dy=30)

SHAPES: dict[str, ShapeSpec] = {
    ENTITY: ShapeSpec("Entity", "rectangle", **_BOX),
    WEAK_ENTITY: ShapeSpec("Weak Entity", "double_rectangle", **_BOX),
    ATTRIBUTE: ShapeSpec("Attribute", "ellipse", **_CIRCLE),
    DERIVED_ATTRIBUTE: ShapeSpec("Derived", "dashed_ellipse", **_CIRCLE),
    MULTI_VALUED_ATTRIBUTE: ShapeSpec("Multi-Valued", "double_ellipse", **_CIRCLE),
    RELATIONSHIP: ShapeSpec("Relationship", "diamond", **_BOX),
}


def shape_for(node_type: str) -> ShapeSpec:
    spec = SHAPES.get(node_type)
    if spec is None:
        raise ValueError(
            editor_error(
                "Shape registry",
                f"unknown node type '{node_type}'",
                f"choose one of: {', '.join(NODE_TYPES)}",
            )
        )
    return spec


def display_label(node_type: str) -> str:
    return shape_for(node_type).display_label


def connection_point(node_type: str, x: float, y: float) -> Point:
    spec = shape_for(node_type)
    return Point(x + spec.anchor_dx, y + spec.anchor_dy)


def node_bounds(node_type: str, x: float, y: float) -> tuple[float, float, float, float]:
    spec = shape_for(node_type)
    x1 = x + spec.body_dx
    y1 = y + spec.body_dy
    return (x1, y1, x1 + spec.body_width, y1 + spec.body_height)


def point_in_body(node_type: str, x: float, y: float, point: Point) -> bool:
    x1, y1, x2, y2 = node_bounds(node_type, x, y)
    if not (x1 <= point.x <= x2 and y1 <= point.y <= y2):
        return False
    geometry = shape_for(node_type).geometry
    cx = (x1 + x2) / 2
    cy = (y1 + y2) / 2
    half_w = (x2 - x1) / 2
    half_h = (y2 - y1) / 2
    if geometry.endswith("ellipse"):
        return ((point.x - cx) / half_w) ** 2 + ((point.y - cy) / half_h) ** 2 <= 1.0
    if geometry == "diamond":
        return abs(point.x - cx) / half_w + abs(point.y - cy) / half_h <= 1.0
    return True


def affordance_centers(node_type: str, x: float, y: float) -> list[tuple[str, Point]]:
    """Control buttons drawn beside a node; primary key only applies to attributes."""
    shape_for(node_type)
    out: list[tuple[str, Point]] = []
    for kind, dy in _AFFORDANCE_ROWS:
        if kind == AFFORDANCE_PRIMARY_KEY and node_type != ATTRIBUTE:
            continue
        out.append((kind, Point(x + AFFORDANCE_COLUMN_OFFSET, y + dy)))
    return out


def cardinality_anchors(start: Point, end: Point) -> tuple[Point, Point]:
    """Label positions for the from/to cardinalities at 20% and 80% along the edge."""
    dx = end.x - start.x
    dy = end.y - start.y
    return (
        Point(start.x + dx * 0.2, start.y + dy * 0.2),
        Point(start.x + dx * 0.8, start.y + dy * 0.8),
    )
