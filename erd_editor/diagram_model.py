from __future__ import annotations

from dataclasses import dataclass, replace
import itertools
import logging
from typing import Iterable

from erd_editor.gui_kit.error_contract import editor_error
from erd_editor.shape_registry import ATTRIBUTE, display_label, shape_for

logger = logging.getLogger("diagram_model")

CARDINALITY_ENDS: tuple[str, ...] = ("from", "to")


@dataclass(frozen=True)
class Node:
    id: int
    type: str
    x: float
    y: float
    label: str
    is_primary_key: bool = False


@dataclass(frozen=True)
class Edge:
    id: int
    from_id: int
    to_id: int
    from_cardinality: str = "1"
    to_cardinality: str = "N"

    def touches(self, node_id: int) -> bool:
        return self.from_id == node_id or self.to_id == node_id

    def joins(self, a: int, b: int) -> bool:
        return {self.from_id, self.to_id} == {a, b}


EdgeSnapshot = tuple[Edge, ...]


class IdSource:
    """Monotonic integer ids; never reused within one diagram."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


def parse_cardinality_end(end: str) -> str:
    clean = str(end).strip().lower()
    if clean not in CARDINALITY_ENDS:
        raise ValueError(
            editor_error(
                "Cardinality / End",
                f"unsupported edge end '{end}'",
                "use 'from' or 'to'",
            )
        )
    return clean


class DiagramModel:
    """Nodes and edges of one diagram.

    Node order is draw order. Edges never reference a missing node: removing a
    node drops its edges in the same call, and restoring a snapshot filters
    out edges whose endpoints are gone.
    """

    def __init__(
        self,
        *,
        default_from_cardinality: str = "1",
        default_to_cardinality: str = "N",
    ) -> None:
        self._nodes: dict[int, Node] = {}
        self._edges: dict[int, Edge] = {}
        self._node_ids = IdSource()
        self._edge_ids = IdSource()
        self.default_from_cardinality = default_from_cardinality
        self.default_to_cardinality = default_to_cardinality

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges.values())

    def find_node(self, node_id: int) -> Node | None:
        return self._nodes.get(node_id)

    def find_edge(self, edge_id: int) -> Edge | None:
        return self._edges.get(edge_id)

    def find_edge_between(self, a: int, b: int) -> Edge | None:
        for edge in self._edges.values():
            if edge.joins(a, b):
                return edge
        return None

    def edges_touching(self, node_id: int) -> tuple[Edge, ...]:
        return tuple(edge for edge in self._edges.values() if edge.touches(node_id))

    def add_node(
        self,
        node_type: str,
        *,
        x: float,
        y: float,
        label: str | None = None,
    ) -> Node:
        shape_for(node_type)
        if label is None:
            label = f"{display_label(node_type)} {len(self._nodes) + 1}"
        node = Node(id=self._node_ids.next_id(), type=node_type, x=x, y=y, label=label)
        self._nodes[node.id] = node
        return node

    def move_node(self, node_id: int, x: float, y: float) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        self._nodes[node_id] = replace(node, x=x, y=y)
        return True

    def set_label(self, node_id: int, label: str) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            return False
        self._nodes[node_id] = replace(node, label=str(label))
        return True

    def toggle_primary_key(self, node_id: int) -> bool:
        node = self._nodes.get(node_id)
        if node is None or node.type != ATTRIBUTE:
            return False
        self._nodes[node_id] = replace(node, is_primary_key=not node.is_primary_key)
        return True

    def remove_node(self, node_id: int) -> tuple[Edge, ...]:
        if node_id not in self._nodes:
            return ()
        removed = self.edges_touching(node_id)
        del self._nodes[node_id]
        for edge in removed:
            del self._edges[edge.id]
        return removed

    def toggle_edge(self, a: int, b: int) -> Edge | None:
        """Add an edge a->b, or remove the existing one between them.

        Returns the edge that was added or removed, None when nothing changed.
        """
        if a == b or a not in self._nodes or b not in self._nodes:
            return None
        existing = self.find_edge_between(a, b)
        if existing is not None:
            del self._edges[existing.id]
            return existing
        edge = Edge(
            id=self._edge_ids.next_id(),
            from_id=a,
            to_id=b,
            from_cardinality=self.default_from_cardinality,
            to_cardinality=self.default_to_cardinality,
        )
        self._edges[edge.id] = edge
        return edge

    def update_cardinality(self, edge_id: int, end: str, value: str) -> bool:
        clean_end = parse_cardinality_end(end)
        edge = self._edges.get(edge_id)
        if edge is None:
            return False
        if clean_end == "from":
            self._edges[edge_id] = replace(edge, from_cardinality=str(value))
        else:
            self._edges[edge_id] = replace(edge, to_cardinality=str(value))
        return True

    def edge_snapshot(self) -> EdgeSnapshot:
        return tuple(self._edges.values())

    def live_edges(self, snapshot: Iterable[Edge]) -> EdgeSnapshot:
        """Return the edges of ``snapshot`` whose endpoints both still exist."""
        return tuple(
            edge for edge in snapshot if edge.from_id in self._nodes and edge.to_id in self._nodes
        )

    def restore_edges(self, snapshot: Iterable[Edge]) -> None:
        snapshot = tuple(snapshot)
        live = self.live_edges(snapshot)
        if len(live) != len(snapshot):
            logger.debug("Dropped %d edge(s) on restore: endpoint no longer exists", len(snapshot) - len(live))
        self._edges = {edge.id: edge for edge in live}
