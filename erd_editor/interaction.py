"""Pointer/keyboard state machine for the ER editor.

``EditorController`` owns the diagram model, the edge history and the single
interaction mode. The Tk shell only delivers events and redraws from
``view_state()``; nothing here imports Tk, so every gesture can be driven
directly from tests.

Modes: Idle, Dragging, Connecting, EditingLabel, EditingCardinality. Node
bodies start drags, affordances (delete / connect / rename / primary key)
route to their own action and never start a drag.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Union

from erd_editor.config import AppConfig
from erd_editor.diagram_model import DiagramModel, Edge, EdgeSnapshot, Node, parse_cardinality_end
from erd_editor.history import EdgeHistory
from erd_editor.hit_testing import Affordance, CardinalityLabel, NodeBody, Target
from erd_editor.shape_registry import (
    AFFORDANCE_CONNECT,
    AFFORDANCE_DELETE,
    AFFORDANCE_PRIMARY_KEY,
    AFFORDANCE_RENAME,
    Point,
    shape_for,
)

logger = logging.getLogger("interaction")


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    node_id: int
    grab_offset: Point


@dataclass(frozen=True)
class Connecting:
    source_id: int


@dataclass(frozen=True)
class EditingLabel:
    node_id: int


@dataclass(frozen=True)
class EditingCardinality:
    edge_id: int
    end: str


Mode = Union[Idle, Dragging, Connecting, EditingLabel, EditingCardinality]

IDLE = Idle()

ACTION_UNDO = "undo"
ACTION_REDO = "redo"
ACTION_FINISH_EDIT = "finish_edit"

ENTER_KEYS = frozenset({"Return", "Enter", "KP_Enter"})


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False


@dataclass(frozen=True)
class EditorViewState:
    """Everything the shell needs to draw one frame."""

    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]
    mode: Mode
    can_undo: bool
    can_redo: bool
    connect_source_id: int | None


def shortcut_action(event: KeyEvent) -> str | None:
    key = str(event.key)
    if key in ENTER_KEYS:
        return ACTION_FINISH_EDIT
    if not (event.ctrl or event.meta):
        return None
    lowered = key.lower()
    if lowered == "z":
        return ACTION_REDO if event.shift else ACTION_UNDO
    if lowered == "y":
        return ACTION_REDO
    return None


def to_canvas_local(screen: Point, origin: Point) -> Point:
    """Map a screen point into canvas space given the canvas's on-screen origin."""
    return Point(screen.x - origin.x, screen.y - origin.y)


class EditorController:
    def __init__(self, cfg: AppConfig | None = None) -> None:
        self.cfg = cfg or AppConfig()
        self.model = DiagramModel(
            default_from_cardinality=self.cfg.default_from_cardinality,
            default_to_cardinality=self.cfg.default_to_cardinality,
        )
        self.history = EdgeHistory(self.model)
        self.mode: Mode = IDLE
        self._edit_baseline: EdgeSnapshot | None = None

    # ---- outputs ----
    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def view_state(self) -> EditorViewState:
        mode = self.mode
        return EditorViewState(
            nodes=self.model.nodes,
            edges=self.model.edges,
            mode=mode,
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            connect_source_id=mode.source_id if isinstance(mode, Connecting) else None,
        )

    # ---- mode plumbing ----
    def _set_mode(self, mode: Mode) -> None:
        if mode != self.mode:
            logger.debug("Mode %s -> %s", self.mode, mode)
        self.mode = mode

    def _end_text_edit(self) -> None:
        mode = self.mode
        if isinstance(mode, EditingCardinality):
            baseline = self._edit_baseline
            self._edit_baseline = None
            if baseline is not None and self.model.edge_snapshot() != baseline:
                self.history.commit(baseline)
            self._set_mode(IDLE)
        elif isinstance(mode, EditingLabel):
            self._set_mode(IDLE)

    def _reset_to_idle(self) -> None:
        self._end_text_edit()
        self._set_mode(IDLE)

    # ---- toolbar ----
    def add_node(self, node_type: str) -> Node:
        shape_for(node_type)
        self._reset_to_idle()
        node = self.model.add_node(
            node_type,
            x=self.cfg.default_node_x,
            y=self.cfg.default_node_y,
        )
        logger.info("Added %s node %s (%s)", node.type, node.id, node.label)
        return node

    def undo(self) -> bool:
        self._end_text_edit()
        return self.history.undo()

    def redo(self) -> bool:
        self._end_text_edit()
        return self.history.redo()

    # ---- pointer stream ----
    def pointer_down(self, position: Point, target: Target | None = None) -> None:
        if isinstance(target, Affordance):
            self.activate_affordance(target)
            return
        if isinstance(target, CardinalityLabel):
            self.activate_cardinality(target.edge_id, target.end)
            return

        self._end_text_edit()
        mode = self.mode
        if isinstance(mode, Dragging):
            # pointer-up was lost; start over
            self._set_mode(IDLE)
            mode = IDLE

        if isinstance(mode, Connecting):
            if isinstance(target, NodeBody):
                self._complete_connect(mode.source_id, target.node_id)
            else:
                logger.debug("Connect from node %s cancelled by background click", mode.source_id)
                self._set_mode(IDLE)
            return

        if not isinstance(target, NodeBody):
            return
        node = self.model.find_node(target.node_id)
        if node is None:
            return
        offset = Point(position.x - node.x, position.y - node.y)
        self._set_mode(Dragging(node.id, offset))

    def pointer_move(self, position: Point) -> None:
        mode = self.mode
        if not isinstance(mode, Dragging):
            return
        moved = self.model.move_node(
            mode.node_id,
            position.x - mode.grab_offset.x,
            position.y - mode.grab_offset.y,
        )
        if not moved:
            logger.debug("Drag target %s no longer exists", mode.node_id)
            self._set_mode(IDLE)

    def pointer_up(self) -> None:
        if isinstance(self.mode, Dragging):
            self._set_mode(IDLE)

    def pointer_leave(self) -> None:
        self.pointer_up()

    # ---- affordances ----
    def activate_affordance(self, affordance: Affordance) -> None:
        handlers = {
            AFFORDANCE_CONNECT: self.activate_connect,
            AFFORDANCE_DELETE: self.activate_delete,
            AFFORDANCE_RENAME: self.activate_label,
            AFFORDANCE_PRIMARY_KEY: self.activate_primary_key,
        }
        handler = handlers.get(affordance.kind)
        if handler is None:
            logger.debug("Ignoring unknown affordance '%s'", affordance.kind)
            return
        handler(affordance.node_id)

    def activate_connect(self, node_id: int) -> None:
        self._end_text_edit()
        mode = self.mode
        if isinstance(mode, Connecting):
            if mode.source_id == node_id:
                logger.debug("Connect from node %s cancelled", node_id)
                self._set_mode(IDLE)
            else:
                self._complete_connect(mode.source_id, node_id)
            return
        if self.model.find_node(node_id) is None:
            self._set_mode(IDLE)
            return
        self._set_mode(Connecting(node_id))

    def _complete_connect(self, source_id: int, target_id: int) -> None:
        before = self.model.edge_snapshot()
        changed = self.model.toggle_edge(source_id, target_id)
        if changed is not None:
            self.history.commit(before)
            action = "Connected" if self.model.find_edge(changed.id) is not None else "Disconnected"
            logger.info("%s nodes %s and %s", action, source_id, target_id)
        self._set_mode(IDLE)

    def activate_delete(self, node_id: int) -> None:
        self._reset_to_idle()
        if self.model.find_node(node_id) is None:
            return
        removed = self.model.remove_node(node_id)
        self.history.drop_dead_entries()
        logger.info("Deleted node %s and %d edge(s)", node_id, len(removed))

    def activate_primary_key(self, node_id: int) -> None:
        self._reset_to_idle()
        self.model.toggle_primary_key(node_id)

    # ---- text editing ----
    def activate_label(self, node_id: int) -> None:
        self._reset_to_idle()
        if self.model.find_node(node_id) is None:
            return
        self._set_mode(EditingLabel(node_id))

    def activate_cardinality(self, edge_id: int, end: str) -> None:
        clean_end = parse_cardinality_end(end)
        self._reset_to_idle()
        if self.model.find_edge(edge_id) is None:
            return
        self._edit_baseline = self.model.edge_snapshot()
        self._set_mode(EditingCardinality(edge_id, clean_end))

    def change_text(self, value: str) -> None:
        mode = self.mode
        if isinstance(mode, EditingLabel):
            if not self.model.set_label(mode.node_id, value):
                logger.debug("Label edit target %s no longer exists", mode.node_id)
                self._set_mode(IDLE)
        elif isinstance(mode, EditingCardinality):
            if not self.model.update_cardinality(mode.edge_id, mode.end, value):
                logger.debug("Cardinality edit target %s no longer exists", mode.edge_id)
                self._edit_baseline = None
                self._set_mode(IDLE)

    def finish_edit(self) -> None:
        self._end_text_edit()

    # ---- keyboard stream ----
    def key_down(self, event: KeyEvent) -> bool:
        action = shortcut_action(event)
        if action == ACTION_UNDO:
            self.undo()
            return True
        if action == ACTION_REDO:
            self.redo()
            return True
        if action == ACTION_FINISH_EDIT:
            if isinstance(self.mode, (EditingLabel, EditingCardinality)):
                self.finish_edit()
                return True
        return False
