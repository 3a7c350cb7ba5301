import tkinter as tk
from types import SimpleNamespace
import unittest
from unittest import mock

from erd_editor.config import AppConfig
from erd_editor.gui_tools.erd_editor_view import ERDEditorToolFrame
from erd_editor.interaction import IDLE, EditingCardinality, EditingLabel, KeyEvent
from erd_editor.shape_registry import ATTRIBUTE, ENTITY, NODE_TYPES, Point


class TestERDEditorView(unittest.TestCase):
    def setUp(self):
        try:
            self.root = tk.Tk()
        except tk.TclError as exc:
            self.skipTest(f"Tk GUI not available in this environment: {exc}")
            return
        self.root.withdraw()
        self.frame = ERDEditorToolFrame(self.root, AppConfig())
        self.frame.pack(fill="both", expand=True)

    def tearDown(self):
        if hasattr(self, "root") and self.root.winfo_exists():
            self.root.destroy()

    def test_undo_redo_buttons_follow_history(self):
        self.assertEqual(str(self.frame.undo_btn.cget("state")), "disabled")
        self.frame._add_node(ENTITY)
        self.frame._add_node(ATTRIBUTE)
        self.frame.controller.activate_connect(1)
        self.frame.controller.activate_connect(2)
        self.frame._draw()
        self.assertEqual(str(self.frame.undo_btn.cget("state")), "normal")
        self.assertEqual(str(self.frame.redo_btn.cget("state")), "disabled")

        self.frame._undo()
        self.assertEqual(self.frame.controller.model.edges, ())
        self.assertEqual(str(self.frame.redo_btn.cget("state")), "normal")

    def test_every_toolbar_shape_renders(self):
        for node_type in NODE_TYPES:
            self.frame._add_node(node_type)
        self.frame._draw()
        self.assertEqual(len(self.frame.controller.model.nodes), len(NODE_TYPES))
        self.assertGreater(len(self.frame.canvas.find_all()), len(NODE_TYPES))
        self.assertIn("6 shapes", self.frame.status_var.get())

    def test_unknown_shape_reports_actionable_error(self):
        with mock.patch.object(self.frame.error_surface, "show_dialog") as show_dialog:
            self.frame._add_node("TABLE")
        show_dialog.assert_called_once()
        self.assertIn("Fix:", self.frame.status_var.get())
        self.assertEqual(self.frame.controller.model.nodes, ())

    def test_inline_label_editor_writes_through_controller(self):
        self.frame._add_node(ENTITY)
        self.frame.controller.activate_label(1)
        self.frame._draw()
        self.assertIsNotNone(self.frame._editor_entry)
        self.assertEqual(self.frame.editor_text_var.get(), "Entity 1")

        self.frame.editor_text_var.set("Customer")
        self.assertEqual(self.frame.controller.model.find_node(1).label, "Customer")
        self.assertEqual(self.frame.controller.mode, EditingLabel(1))

        self.frame._on_editor_finished()
        self.assertEqual(self.frame.controller.mode, IDLE)
        self.assertIsNone(self.frame._editor_entry)

    def test_inline_cardinality_editor_commits_once(self):
        self.frame._add_node(ENTITY)
        self.frame._add_node(ATTRIBUTE)
        controller = self.frame.controller
        controller.activate_connect(1)
        controller.activate_connect(2)
        edge_id = controller.model.edges[0].id

        controller.activate_cardinality(edge_id, "to")
        self.frame._draw()
        self.assertEqual(controller.mode, EditingCardinality(edge_id, "to"))
        self.assertEqual(self.frame.editor_text_var.get(), "N")
        self.frame.editor_text_var.set("M")
        self.frame._on_editor_finished()

        self.assertEqual(controller.model.find_edge(edge_id).to_cardinality, "M")
        self.frame._undo()
        self.assertEqual(controller.model.find_edge(edge_id).to_cardinality, "N")

    def test_canvas_point_accounts_for_scroll_offset(self):
        canvas = self.frame.canvas
        self.root.update_idletasks()
        canvas.xview_moveto(0.25)
        canvas.yview_moveto(0.5)
        offset_x = float(canvas.canvasx(0))
        offset_y = float(canvas.canvasy(0))
        self.assertGreater(offset_x, 0)
        self.assertGreater(offset_y, 0)

        event = SimpleNamespace(x_root=canvas.winfo_rootx() + 40, y_root=canvas.winfo_rooty() + 30)
        point = self.frame._canvas_point(event)

        self.assertAlmostEqual(point.x, 40 + offset_x)
        self.assertAlmostEqual(point.y, 30 + offset_y)

    def test_scrolled_click_grabs_node_at_canvas_position(self):
        canvas = self.frame.canvas
        self.frame._add_node(ENTITY)
        self.frame.controller.model.move_node(1, 700, 500)
        self.root.update_idletasks()
        canvas.xview_moveto(0.5)
        canvas.yview_moveto(0.5)
        offset = Point(float(canvas.canvasx(0)), float(canvas.canvasy(0)))

        screen_x = canvas.winfo_rootx() + (710 - offset.x)
        screen_y = canvas.winfo_rooty() + (520 - offset.y)
        self.frame._on_pointer_down(SimpleNamespace(x_root=screen_x, y_root=screen_y))

        self.assertEqual(self.frame.controller.mode.node_id, 1)
        self.assertAlmostEqual(self.frame.controller.mode.grab_offset.x, 10)
        self.assertAlmostEqual(self.frame.controller.mode.grab_offset.y, 20)

    def test_destroying_frame_releases_toplevel_shortcuts(self):
        self.assertTrue(self.frame.shortcuts.active)
        self.assertNotEqual(self.root.bind("<Control-z>").strip(), "")

        self.frame.destroy()

        self.assertFalse(self.frame.shortcuts.active)
        self.assertEqual(self.root.bind("<Control-z>").strip(), "")
        self.assertEqual(self.root.bind("<Control-y>").strip(), "")

    def test_undo_shortcut_with_empty_history_explains_in_status(self):
        with mock.patch.object(self.frame.error_surface, "show_dialog") as show_dialog:
            self.frame._on_key(KeyEvent("z", ctrl=True))
            self.frame._on_key(KeyEvent("y", ctrl=True))
        show_dialog.assert_not_called()
        self.assertIn("Redo: there is no undone connection change to redo", self.frame.status_var.get())

        self.frame._undo()
        self.assertIn("Undo: there is no connection change to undo", self.frame.status_var.get())

    def test_callback_errors_reach_dialog_and_status(self):
        with mock.patch.object(self.frame.error_surface, "show_dialog") as show_dialog:
            with self.assertLogs("erd_editor_view", level="ERROR"):
                self.frame.report_callback_exception(RuntimeError, RuntimeError("boom"), None)
        show_dialog.assert_called_once()
        self.assertEqual(
            self.frame.status_var.get(),
            "ER Editor / Editor: boom. Fix: undo the last change or restart the editor.",
        )

    def test_shortcuts_are_listed(self):
        items = self.frame.shortcuts.items()
        self.assertEqual(
            items,
            [
                ("<Control-z>", "Undo edge change"),
                ("<Control-Shift-Z>", "Redo edge change"),
                ("<Control-y>", "Redo edge change"),
            ],
        )


if __name__ == "__main__":
    unittest.main()
