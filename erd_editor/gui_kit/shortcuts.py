"""Keyboard shortcut registration and discoverable help dialog."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import tkinter as tk
from tkinter import ttk

from erd_editor.gui_kit.error_contract import editor_error

__all__ = ["ShortcutManager"]


@dataclass(frozen=True)
class _ShortcutSpec:
    sequences: tuple[str, ...]
    description: str
    callback: Callable[[], None]


class ShortcutManager:
    """Shortcuts bound on the widget's toplevel while the editor is active."""

    def __init__(self, widget: tk.Widget) -> None:
        self.widget = widget
        self._items: list[_ShortcutSpec] = []
        self._help_dialog: tk.Toplevel | None = None
        self._bound_root: tk.Misc | None = None
        self._bound_ids: dict[str, list[str]] = {}

    @property
    def active(self) -> bool:
        return self._bound_root is not None

    def register_ctrl_cmd(
        self,
        key: str,
        description: str,
        callback: Callable[[], None],
        *,
        shift: bool = False,
    ) -> None:
        key_token = str(key).strip()
        if key_token == "" or str(description).strip() == "":
            raise ValueError(
                editor_error(
                    "Shortcuts",
                    "key and description are required",
                    "provide a key token such as 'z' and a short description",
                )
            )
        # Tk reports shifted letters with an upper-case keysym.
        if shift:
            key_token = f"Shift-{key_token.upper()}"
        spec = _ShortcutSpec(
            (f"<Control-{key_token}>", f"<Command-{key_token}>"),
            description.strip(),
            callback,
        )
        self._items.append(spec)
        if self.active:
            self._bind_spec(spec)

    def activate(self) -> None:
        if self.active:
            return
        self._bound_root = self.widget.winfo_toplevel()
        self._bound_ids.clear()
        for spec in self._items:
            self._bind_spec(spec)

    def deactivate(self) -> None:
        root = self._bound_root
        if root is None:
            return
        for sequence, bind_ids in list(self._bound_ids.items()):
            for bind_id in bind_ids:
                root.unbind(sequence, bind_id)
        self._bound_ids.clear()
        self._bound_root = None

    def _bind_spec(self, spec: _ShortcutSpec) -> None:
        root = self._bound_root
        if root is None:
            return
        for sequence in spec.sequences:
            def _wrapped(_event=None, callback=spec.callback):
                callback()
                return "break"

            try:
                bind_id = root.bind(sequence, _wrapped, add="+")
            except tk.TclError:
                # <Command-...> only exists on macOS builds of Tk
                continue
            if bind_id:
                self._bound_ids.setdefault(sequence, []).append(bind_id)

    def items(self) -> list[tuple[str, str]]:
        return [(spec.sequences[0], spec.description) for spec in self._items]

    def show_help_dialog(self, *, title: str = "Keyboard shortcuts") -> None:
        if self._help_dialog is not None and self._help_dialog.winfo_exists():
            self._help_dialog.lift()
            return

        top = tk.Toplevel(self.widget)
        self._help_dialog = top
        top.title(title)
        top.transient(self.widget.winfo_toplevel())

        body = ttk.Frame(top, padding=12)
        body.pack(fill="both", expand=True)
        tree = ttk.Treeview(body, columns=("shortcut", "action"), show="headings", height=6)
        tree.heading("shortcut", text="Shortcut")
        tree.heading("action", text="Action")
        tree.column("shortcut", width=180, anchor="w")
        tree.column("action", width=240, anchor="w")
        tree.pack(fill="both", expand=True)
        for seq, desc in self.items():
            tree.insert("", tk.END, values=(seq, desc))
        ttk.Button(body, text="Close", command=top.destroy).pack(anchor="e", pady=(10, 0))
