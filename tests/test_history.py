import unittest

from erd_editor.diagram_model import DiagramModel
from erd_editor.history import EdgeHistory
from erd_editor.shape_registry import ATTRIBUTE, ENTITY


class TestEdgeHistory(unittest.TestCase):
    def setUp(self):
        self.model = DiagramModel()
        for _ in range(4):
            self.model.add_node(ENTITY, x=0, y=0)
        self.history = EdgeHistory(self.model)

    def _toggle(self, a: int, b: int) -> None:
        before = self.model.edge_snapshot()
        self.model.toggle_edge(a, b)
        self.history.commit(before)

    def _pairs(self) -> list[tuple[int, int]]:
        return [(edge.from_id, edge.to_id) for edge in self.model.edges]

    def test_empty_history_undo_and_redo_are_noops(self):
        self.assertFalse(self.history.can_undo)
        self.assertFalse(self.history.can_redo)
        self.assertFalse(self.history.undo())
        self.assertFalse(self.history.redo())
        self.assertEqual(self.model.edges, ())

    def test_undo_all_then_redo_all_round_trips(self):
        self._toggle(1, 2)
        self._toggle(2, 3)
        self._toggle(3, 4)
        self._toggle(1, 2)
        final = self.model.edge_snapshot()

        for _ in range(4):
            self.assertTrue(self.history.undo())
        self.assertEqual(self.model.edges, ())
        self.assertFalse(self.history.can_undo)

        for _ in range(4):
            self.assertTrue(self.history.redo())
        self.assertEqual(self.model.edge_snapshot(), final)
        self.assertFalse(self.history.can_redo)

    def test_commit_after_undo_discards_redo_branch(self):
        self._toggle(1, 2)
        self._toggle(2, 3)
        self.history.undo()
        self.assertTrue(self.history.can_redo)

        self._toggle(3, 4)

        self.assertFalse(self.history.can_redo)
        self.assertFalse(self.history.redo())
        self.assertEqual(self._pairs(), [(1, 2), (3, 4)])

    def test_cardinality_change_is_restored_by_undo_and_redo(self):
        self._toggle(1, 2)
        edge_id = self.model.edges[0].id
        before = self.model.edge_snapshot()
        self.model.update_cardinality(edge_id, "from", "0..1")
        self.history.commit(before)

        self.history.undo()
        self.assertEqual(self.model.find_edge(edge_id).from_cardinality, "1")
        self.history.redo()
        self.assertEqual(self.model.find_edge(edge_id).from_cardinality, "0..1")

    def test_snapshots_are_not_affected_by_later_edits(self):
        self._toggle(1, 2)
        edge_id = self.model.edges[0].id
        before = self.model.edge_snapshot()
        self.model.update_cardinality(edge_id, "to", "M")
        self.history.commit(before)
        self.model.update_cardinality(edge_id, "to", "changed without commit")

        self.history.undo()
        self.assertEqual(self.model.find_edge(edge_id).to_cardinality, "N")

    def test_undo_after_node_delete_never_restores_dangling_edges(self):
        attribute = self.model.add_node(ATTRIBUTE, x=0, y=0)
        self._toggle(1, attribute.id)
        self._toggle(1, 2)
        self.model.remove_node(attribute.id)

        self.history.undo()

        for edge in self.model.edges:
            self.assertIsNotNone(self.model.find_node(edge.from_id))
            self.assertIsNotNone(self.model.find_node(edge.to_id))
        self.assertEqual(self._pairs(), [])

    def test_drop_dead_entries_collapses_steps_emptied_by_node_delete(self):
        self._toggle(1, 2)
        self._toggle(3, 4)
        self._toggle(1, 3)
        self.history.undo()
        self.model.remove_node(4)

        self.history.drop_dead_entries()

        # adding 3-4 is no longer a step of its own
        self.history.undo()
        self.assertEqual(self._pairs(), [])
        self.assertFalse(self.history.can_undo)
        self.history.redo()
        self.assertEqual(self._pairs(), [(1, 2)])
        self.history.redo()
        self.assertEqual(self._pairs(), [(1, 2), (1, 3)])
        self.assertFalse(self.history.can_redo)

    def test_drop_dead_entries_keeps_live_history_untouched(self):
        self._toggle(1, 2)
        self._toggle(2, 3)
        self.history.drop_dead_entries()
        self.history.undo()
        self.assertEqual(self._pairs(), [(1, 2)])
        self.history.undo()
        self.assertEqual(self._pairs(), [])

    def test_clear_drops_both_stacks(self):
        self._toggle(1, 2)
        self._toggle(2, 3)
        self.history.undo()
        self.history.clear()
        self.assertFalse(self.history.can_undo)
        self.assertFalse(self.history.can_redo)


if __name__ == "__main__":
    unittest.main()
