import tkinter as tk
import unittest

from erd_editor.gui_kit.error_contract import as_editor_error
from erd_editor.gui_kit.error_contract import editor_error
from erd_editor.gui_kit.error_surface import ErrorSurface


class TestErrorSurface(unittest.TestCase):
    def _surface(self, calls: list[str]) -> ErrorSurface:
        return ErrorSurface(
            context="ER Editor",
            dialog_title="ER editor error",
            show_dialog=lambda title, msg: calls.append(f"dialog:{title}:{msg}"),
            set_status=lambda msg: calls.append(f"status:{msg}"),
        )

    def test_editor_error_uses_canonical_shape(self):
        message = editor_error("Cardinality / End", "unsupported edge end 'x'", "use 'from' or 'to'")
        self.assertEqual(
            message,
            "ER Editor / Cardinality / End: unsupported edge end 'x'. Fix: use 'from' or 'to'.",
        )

    def test_editor_error_fills_blank_parts(self):
        message = editor_error(" ", "", "", context="")
        self.assertEqual(message, "Unknown: unknown issue. Fix: undo the last action and retry.")

    def test_as_editor_error_keeps_shaped_text_and_wraps_raw_text(self):
        shaped = editor_error("Shape registry", "unknown node type 'X'", "choose a toolbar shape")
        self.assertEqual(as_editor_error(ValueError(shaped), location="Add shape", hint="retry"), shaped)

        wrapped = as_editor_error(
            tk.TclError('invalid command name ".!canvas"'),
            location="Editor",
            hint="restart the editor",
        )
        self.assertEqual(wrapped, 'ER Editor / Editor: invalid command name ".!canvas". Fix: restart the editor.')

    def test_mixed_mode_routes_to_dialog_and_status(self):
        calls: list[str] = []
        message = self._surface(calls).emit(location="Add shape", issue="unknown type", hint="pick a toolbar shape")
        self.assertEqual(
            calls,
            [f"dialog:ER editor error:{message}", f"status:{message}"],
        )

    def test_status_mode_skips_dialog(self):
        calls: list[str] = []
        self._surface(calls).emit(location="Undo", issue="nothing to undo", hint="connect nodes first", mode="status")
        self.assertEqual(calls, ["status:ER Editor / Undo: nothing to undo. Fix: connect nodes first."])

    def test_emit_exception_actionable_wraps_plain_exceptions(self):
        calls: list[str] = []
        normalized = self._surface(calls).emit_exception_actionable(
            RuntimeError("boom"),
            location="Editor",
            hint="retry",
        )
        self.assertEqual(normalized, "ER Editor / Editor: boom. Fix: retry.")
        self.assertEqual(calls[-1], f"status:{normalized}")


if __name__ == "__main__":
    unittest.main()
