from __future__ import annotations

import logging

from erd_editor.diagram_model import DiagramModel, EdgeSnapshot

logger = logging.getLogger("history")


class EdgeHistory:
    """Undo/redo over the model's edge set, kept as a pair of snapshot stacks.

    Callers mutate the model first and then call ``commit`` with the snapshot
    taken before the change. Nodes are never recorded.
    """

    def __init__(self, model: DiagramModel) -> None:
        self.model = model
        self._undo_stack: list[EdgeSnapshot] = []
        self._redo_stack: list[EdgeSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def commit(self, previous: EdgeSnapshot) -> None:
        self._undo_stack.append(tuple(previous))
        self._redo_stack.clear()
        logger.debug("Committed edge change (undo depth=%d)", len(self._undo_stack))

    def undo(self) -> bool:
        if not self._undo_stack:
            return False
        self._redo_stack.append(self.model.edge_snapshot())
        self.model.restore_edges(self._undo_stack.pop())
        logger.debug("Undo (undo depth=%d, redo depth=%d)", len(self._undo_stack), len(self._redo_stack))
        return True

    def redo(self) -> bool:
        if not self._redo_stack:
            return False
        self._undo_stack.append(self.model.edge_snapshot())
        self.model.restore_edges(self._redo_stack.pop())
        logger.debug("Redo (undo depth=%d, redo depth=%d)", len(self._undo_stack), len(self._redo_stack))
        return True

    def drop_dead_entries(self) -> None:
        """Forget snapshots that no longer differ once deleted nodes' edges are gone.

        Called after a node deletion so undo/redo never offer a step that
        changes nothing on screen.
        """
        current = self.model.edge_snapshot()
        undo_before, redo_before = len(self._undo_stack), len(self._redo_stack)
        self._undo_stack = self._collapse(self._undo_stack, current)
        self._redo_stack = self._collapse(self._redo_stack, current)
        if (len(self._undo_stack), len(self._redo_stack)) != (undo_before, redo_before):
            logger.debug(
                "Dropped stale history entries (undo depth=%d, redo depth=%d)",
                len(self._undo_stack),
                len(self._redo_stack),
            )

    def _collapse(self, stack: list[EdgeSnapshot], current: EdgeSnapshot) -> list[EdgeSnapshot]:
        # Walk from the top of the stack; keep only snapshots that differ from their newer neighbour.
        kept: list[EdgeSnapshot] = []
        newer = current
        for snapshot in reversed(stack):
            live = self.model.live_edges(snapshot)
            if live != newer:
                kept.append(live)
                newer = live
        kept.reverse()
        return kept

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()
