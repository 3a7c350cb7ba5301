from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from erd_editor.diagram_model import DiagramModel
from erd_editor.shape_registry import (
    AFFORDANCE_RADIUS,
    CARDINALITY_HIT_RADIUS,
    Point,
    affordance_centers,
    cardinality_anchors,
    connection_point,
    point_in_body,
)


@dataclass(frozen=True)
class NodeBody:
    node_id: int


@dataclass(frozen=True)
class Affordance:
    node_id: int
    kind: str


@dataclass(frozen=True)
class CardinalityLabel:
    edge_id: int
    end: str


Target = Union[NodeBody, Affordance, CardinalityLabel]


def _within(point: Point, center: Point, radius: float) -> bool:
    return (point.x - center.x) ** 2 + (point.y - center.y) ** 2 <= radius**2


def edge_endpoints(model: DiagramModel, edge_id: int) -> tuple[Point, Point] | None:
    edge = model.find_edge(edge_id)
    if edge is None:
        return None
    start = model.find_node(edge.from_id)
    end = model.find_node(edge.to_id)
    if start is None or end is None:
        return None
    return (
        connection_point(start.type, start.x, start.y),
        connection_point(end.type, end.x, end.y),
    )


def hit_test(model: DiagramModel, point: Point) -> Target | None:
    """Topmost target under a canvas-local point, None for the background.

    Affordances sit above cardinality labels, which sit above node bodies.
    Later nodes are drawn on top of earlier ones.
    """
    nodes = list(reversed(model.nodes))
    for node in nodes:
        for kind, center in affordance_centers(node.type, node.x, node.y):
            if _within(point, center, AFFORDANCE_RADIUS):
                return Affordance(node.id, kind)

    for edge in reversed(model.edges):
        endpoints = edge_endpoints(model, edge.id)
        if endpoints is None:
            continue
        from_anchor, to_anchor = cardinality_anchors(*endpoints)
        if _within(point, from_anchor, CARDINALITY_HIT_RADIUS):
            return CardinalityLabel(edge.id, "from")
        if _within(point, to_anchor, CARDINALITY_HIT_RADIUS):
            return CardinalityLabel(edge.id, "to")

    for node in nodes:
        if point_in_body(node.type, node.x, node.y, point):
            return NodeBody(node.id)
    return None
