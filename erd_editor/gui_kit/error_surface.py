from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from erd_editor.gui_kit.error_contract import as_editor_error
from erd_editor.gui_kit.error_contract import editor_error

__all__ = [
    "show_error_dialog",
    "ErrorSurface",
]


def show_error_dialog(title: str, message: str) -> None:
    from tkinter import messagebox

    messagebox.showerror(title, message)


@dataclass
class ErrorSurface:
    """Shows editor messages in the status line, and for failures also in a dialog.

    ``mode="status"`` is for notices the user can act on without interruption
    (e.g. nothing to undo); ``mode="mixed"`` adds the error dialog.
    """

    context: str
    dialog_title: str
    show_dialog: Callable[[str, str], None] | None = None
    set_status: Callable[[str], None] | None = None

    def _show(self, message: str, *, mode: str) -> str:
        if str(mode).strip().lower() != "status" and self.show_dialog is not None:
            self.show_dialog(self.dialog_title, message)
        if self.set_status is not None:
            self.set_status(message)
        return message

    def emit(self, *, location: str, issue: str, hint: str, mode: str = "mixed") -> str:
        return self._show(editor_error(location, issue, hint, context=self.context), mode=mode)

    def emit_exception_actionable(
        self,
        exc: BaseException | str,
        *,
        location: str,
        hint: str,
        mode: str = "mixed",
    ) -> str:
        message = as_editor_error(exc, location=location, hint=hint, context=self.context)
        return self._show(message, mode=mode)
