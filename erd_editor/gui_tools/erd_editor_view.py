import logging
import tkinter as tk
from tkinter import ttk

from erd_editor.config import AppConfig
from erd_editor.diagram_model import Edge, Node
from erd_editor.gui_kit.error_surface import ErrorSurface
from erd_editor.gui_kit.error_surface import show_error_dialog
from erd_editor.gui_kit.shortcuts import ShortcutManager
from erd_editor.hit_testing import hit_test
from erd_editor.interaction import (
    ACTION_REDO,
    ACTION_UNDO,
    Connecting,
    Dragging,
    EditingCardinality,
    EditingLabel,
    EditorController,
    EditorViewState,
    KeyEvent,
    shortcut_action,
    to_canvas_local,
)
from erd_editor.shape_registry import (
    AFFORDANCE_CONNECT,
    AFFORDANCE_DELETE,
    AFFORDANCE_PRIMARY_KEY,
    AFFORDANCE_RADIUS,
    NODE_TYPES,
    Point,
    affordance_centers,
    cardinality_anchors,
    connection_point,
    display_label,
    node_bounds,
    shape_for,
)

logger = logging.getLogger("erd_editor_view")

_AFFORDANCE_GLYPHS = {
    AFFORDANCE_DELETE: "✕",
    AFFORDANCE_PRIMARY_KEY: "PK",
    AFFORDANCE_CONNECT: "↔",
}
_RENAME_GLYPH = "✎"


def draw_edge(canvas: tk.Canvas, edge: Edge, start: Node, end: Node, *, editing_end: str | None) -> None:
    p1 = connection_point(start.type, start.x, start.y)
    p2 = connection_point(end.type, end.x, end.y)
    canvas.create_line(p1.x, p1.y, p2.x, p2.y, fill="#1a2a44", width=2)
    from_anchor, to_anchor = cardinality_anchors(p1, p2)
    for end_name, anchor, text in (
        ("from", from_anchor, edge.from_cardinality),
        ("to", to_anchor, edge.to_cardinality),
    ):
        if editing_end == end_name:
            continue
        canvas.create_oval(anchor.x - 11, anchor.y - 9, anchor.x + 11, anchor.y + 9, fill="#f3f6fb", outline="")
        canvas.create_text(anchor.x, anchor.y, text=text, font=("Segoe UI", 9), fill="#1f5a95")


def draw_node(
    canvas: tk.Canvas,
    node: Node,
    *,
    show_label: bool,
    is_connect_source: bool,
) -> None:
    spec = shape_for(node.type)
    x1, y1, x2, y2 = node_bounds(node.type, node.x, node.y)
    style = {"fill": "#ffffff", "outline": "#1a2a44", "width": 2}
    if spec.geometry in {"rectangle", "double_rectangle"}:
        canvas.create_rectangle(x1, y1, x2, y2, **style)
        if spec.geometry == "double_rectangle":
            canvas.create_rectangle(x1 + 5, y1 + 5, x2 - 5, y2 - 5, outline="#1a2a44", width=2)
    elif spec.geometry == "diamond":
        cx = (x1 + x2) / 2
        cy = (y1 + y2) / 2
        canvas.create_polygon(cx, y1, x2, cy, cx, y2, x1, cy, **style)
    else:
        dash = (5, 5) if spec.geometry == "dashed_ellipse" else None
        canvas.create_oval(x1, y1, x2, y2, dash=dash, **style)
        if spec.geometry == "double_ellipse":
            canvas.create_oval(x1 + 5, y1 + 5, x2 - 5, y2 - 5, outline="#1a2a44", width=2)

    if show_label:
        anchor = connection_point(node.type, node.x, node.y)
        font = ("Segoe UI", 9, "underline") if node.is_primary_key else ("Segoe UI", 9)
        canvas.create_text(anchor.x, anchor.y, text=node.label, font=font, fill="#1a2a44")

    for kind, center in affordance_centers(node.type, node.x, node.y):
        if kind == AFFORDANCE_DELETE:
            fill = "#d9534f"
        elif kind == AFFORDANCE_PRIMARY_KEY:
            fill = "#2e9e5b" if node.is_primary_key else "#9aa5b1"
        elif kind == AFFORDANCE_CONNECT:
            fill = "#2e9e5b" if is_connect_source else "#1f5a95"
        else:
            fill = "#6b7a90"
        r = AFFORDANCE_RADIUS
        canvas.create_oval(center.x - r, center.y - r, center.x + r, center.y + r, fill=fill, outline="")
        canvas.create_text(
            center.x,
            center.y,
            text=_AFFORDANCE_GLYPHS.get(kind, _RENAME_GLYPH),
            font=("Segoe UI", 7, "bold"),
            fill="#ffffff",
        )


class ERDEditorToolFrame(ttk.Frame):
    """Canvas editor for ER diagrams; all state lives in the controller."""
    ERROR_SURFACE_CONTEXT = "ER Editor"
    ERROR_DIALOG_TITLE = "ER editor error"

    def __init__(
        self,
        parent: tk.Widget,
        cfg: AppConfig,
        *,
        controller: EditorController | None = None,
        title_text: str = "ER Diagram Editor",
    ) -> None:
        super().__init__(parent, padding=16)
        self.cfg = cfg
        self.controller = controller or EditorController(cfg)
        self._editor_entry: ttk.Entry | None = None
        self._editor_target: object | None = None
        self._syncing_editor = False

        self.status_var = tk.StringVar(value="Add a shape from the toolbar to start.")
        self.editor_text_var = tk.StringVar(value="")
        self.editor_text_var.trace_add("write", lambda *_args: self._on_editor_text_changed())
        self.error_surface = ErrorSurface(
            context=self.ERROR_SURFACE_CONTEXT,
            dialog_title=self.ERROR_DIALOG_TITLE,
            show_dialog=show_error_dialog,
            set_status=self.status_var.set,
        )

        header = ttk.Frame(self)
        header.pack(fill="x", pady=(0, 8))
        ttk.Label(header, text=title_text, font=("Segoe UI", 16, "bold")).pack(side="left")
        ttk.Button(header, text="Shortcuts", command=self._show_shortcuts).pack(side="right")
        self.redo_btn = ttk.Button(header, text="Redo", command=self._redo)
        self.redo_btn.pack(side="right", padx=(0, 8))
        self.undo_btn = ttk.Button(header, text="Undo", command=self._undo)
        self.undo_btn.pack(side="right", padx=(0, 8))

        toolbar = ttk.Frame(self)
        toolbar.pack(fill="x", pady=(0, 8))
        for node_type in NODE_TYPES:
            ttk.Button(
                toolbar,
                text=display_label(node_type),
                command=lambda t=node_type: self._add_node(t),
            ).pack(side="left", padx=(0, 6))

        diagram_box = ttk.LabelFrame(self, text="Diagram", padding=8)
        diagram_box.pack(fill="both", expand=True)
        diagram_box.columnconfigure(0, weight=1)
        diagram_box.rowconfigure(0, weight=1)
        self.canvas = tk.Canvas(
            diagram_box,
            background="#f3f6fb",
            highlightthickness=1,
            highlightbackground="#a8b7cc",
            scrollregion=(0, 0, cfg.canvas_width, cfg.canvas_height),
        )
        self.canvas.grid(row=0, column=0, sticky="nsew")
        y_scroll = ttk.Scrollbar(diagram_box, orient="vertical", command=self.canvas.yview)
        y_scroll.grid(row=0, column=1, sticky="ns")
        x_scroll = ttk.Scrollbar(diagram_box, orient="horizontal", command=self.canvas.xview)
        x_scroll.grid(row=1, column=0, sticky="ew")
        self.canvas.configure(yscrollcommand=y_scroll.set, xscrollcommand=x_scroll.set)
        self.canvas.bind("<ButtonPress-1>", self._on_pointer_down)
        self.canvas.bind("<B1-Motion>", self._on_pointer_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_pointer_up)
        self.canvas.bind("<Leave>", self._on_pointer_leave)

        ttk.Label(self, textvariable=self.status_var).pack(anchor="w", pady=(8, 0))

        self.shortcuts = ShortcutManager(self)
        self.shortcuts.register_ctrl_cmd("z", "Undo edge change", lambda: self._on_key(KeyEvent("z", ctrl=True)))
        self.shortcuts.register_ctrl_cmd(
            "z",
            "Redo edge change",
            lambda: self._on_key(KeyEvent("z", ctrl=True, shift=True)),
            shift=True,
        )
        self.shortcuts.register_ctrl_cmd("y", "Redo edge change", lambda: self._on_key(KeyEvent("y", ctrl=True)))
        self.shortcuts.activate()
        self.bind("<Destroy>", self._on_destroy, add="+")
        self._draw()

    def _on_destroy(self, event: tk.Event) -> None:
        # shortcuts live on the toplevel, which can outlive this frame
        if event.widget is self:
            self.shortcuts.deactivate()

    def report_callback_exception(self, exc_type, exc, tb) -> None:
        """Tk callback error hook: log the traceback, then tell the user."""
        logger.error("Unhandled error in editor callback", exc_info=(exc_type, exc, tb))
        self.error_surface.emit_exception_actionable(
            exc,
            location="Editor",
            hint="undo the last change or restart the editor",
        )

    # ---- event delivery ----
    def _canvas_point(self, event: tk.Event) -> Point:
        origin = Point(
            self.canvas.winfo_rootx() - float(self.canvas.canvasx(0)),
            self.canvas.winfo_rooty() - float(self.canvas.canvasy(0)),
        )
        return to_canvas_local(Point(event.x_root, event.y_root), origin)

    def _on_pointer_down(self, event: tk.Event) -> None:
        point = self._canvas_point(event)
        target = hit_test(self.controller.model, point)
        self.controller.pointer_down(point, target)
        if not isinstance(self.controller.mode, (EditingLabel, EditingCardinality)):
            self.canvas.focus_set()
        self._draw()

    def _on_pointer_move(self, event: tk.Event) -> None:
        if not isinstance(self.controller.mode, Dragging):
            return
        self.controller.pointer_move(self._canvas_point(event))
        self._draw()

    def _on_pointer_up(self, _event: tk.Event) -> None:
        self.controller.pointer_up()
        self._draw()

    def _on_pointer_leave(self, _event: tk.Event) -> None:
        if isinstance(self.controller.mode, Dragging):
            self.controller.pointer_leave()
            self._draw()

    def _on_key(self, event: KeyEvent) -> None:
        action = shortcut_action(event)
        if action == ACTION_UNDO:
            self._undo()
        elif action == ACTION_REDO:
            self._redo()
        elif self.controller.key_down(event):
            self._draw()

    def _on_editor_text_changed(self) -> None:
        if self._syncing_editor:
            return
        self.controller.change_text(self.editor_text_var.get())
        if not isinstance(self.controller.mode, (EditingLabel, EditingCardinality)):
            self._draw()

    def _on_editor_finished(self, _event: tk.Event | None = None) -> str:
        if isinstance(self.controller.mode, (EditingLabel, EditingCardinality)):
            self.controller.key_down(KeyEvent("Return"))
            self._draw()
        return "break"

    # ---- toolbar ----
    def _add_node(self, node_type: str) -> None:
        try:
            node = self.controller.add_node(node_type)
        except ValueError as exc:
            logger.warning("Add shape failed: %s", exc)
            self.error_surface.emit_exception_actionable(
                exc,
                location="Add shape",
                hint="choose a shape from the toolbar",
            )
            return
        self._draw()
        self.status_var.set(f"Added '{node.label}'. Drag it into place.")

    def _undo(self) -> None:
        undone = self.controller.undo()
        self._draw()
        if not undone:
            self.error_surface.emit(
                location="Undo",
                issue="there is no connection change to undo",
                hint="connect two shapes or edit a cardinality first",
                mode="status",
            )

    def _redo(self) -> None:
        redone = self.controller.redo()
        self._draw()
        if not redone:
            self.error_surface.emit(
                location="Redo",
                issue="there is no undone connection change to redo",
                hint="use Undo before Redo",
                mode="status",
            )

    def _show_shortcuts(self) -> None:
        self.shortcuts.show_help_dialog(title="ER editor shortcuts")

    # ---- rendering ----
    def _status_text(self, state: EditorViewState) -> str:
        summary = f"{len(state.nodes)} shapes, {len(state.edges)} connections."
        mode = state.mode
        if isinstance(mode, Connecting):
            return f"{summary} Connecting: pick the target's link button, or click empty canvas to cancel."
        if isinstance(mode, Dragging):
            return f"{summary} Moving shape."
        if isinstance(mode, (EditingLabel, EditingCardinality)):
            return f"{summary} Editing text: press Enter to finish."
        return summary

    def _draw(self) -> None:
        state = self.controller.view_state()
        self.canvas.delete("all")
        node_by_id = {node.id: node for node in state.nodes}
        mode = state.mode

        for edge in state.edges:
            start = node_by_id.get(edge.from_id)
            end = node_by_id.get(edge.to_id)
            if start is None or end is None:
                continue
            editing_end = mode.end if isinstance(mode, EditingCardinality) and mode.edge_id == edge.id else None
            draw_edge(self.canvas, edge, start, end, editing_end=editing_end)

        for node in state.nodes:
            draw_node(
                self.canvas,
                node,
                show_label=not (isinstance(mode, EditingLabel) and mode.node_id == node.id),
                is_connect_source=state.connect_source_id == node.id,
            )

        self._place_inline_editor(state, node_by_id)
        self.undo_btn.configure(state=("normal" if state.can_undo else "disabled"))
        self.redo_btn.configure(state=("normal" if state.can_redo else "disabled"))
        self.status_var.set(self._status_text(state))

    def _place_inline_editor(self, state: EditorViewState, node_by_id: dict[int, Node]) -> None:
        mode = state.mode
        if isinstance(mode, EditingLabel):
            node = node_by_id[mode.node_id]
            anchor = connection_point(node.type, node.x, node.y)
            value, width = node.label, 12
        elif isinstance(mode, EditingCardinality):
            edge = next(e for e in state.edges if e.id == mode.edge_id)
            start, end = node_by_id[edge.from_id], node_by_id[edge.to_id]
            anchors = cardinality_anchors(
                connection_point(start.type, start.x, start.y),
                connection_point(end.type, end.x, end.y),
            )
            anchor = anchors[0] if mode.end == "from" else anchors[1]
            value = edge.from_cardinality if mode.end == "from" else edge.to_cardinality
            width = 4
        else:
            self._destroy_inline_editor()
            return

        if self._editor_entry is None or self._editor_target != mode:
            self._destroy_inline_editor()
            self._syncing_editor = True
            self.editor_text_var.set(value)
            self._syncing_editor = False
            entry = ttk.Entry(self.canvas, textvariable=self.editor_text_var, width=width, justify="center")
            entry.bind("<Return>", self._on_editor_finished)
            entry.bind("<KP_Enter>", self._on_editor_finished)
            entry.bind("<FocusOut>", self._on_editor_finished)
            self._editor_entry = entry
            self._editor_target = mode
            entry.focus_set()
            entry.select_range(0, tk.END)
        self.canvas.create_window(anchor.x, anchor.y, window=self._editor_entry)

    def _destroy_inline_editor(self) -> None:
        entry = self._editor_entry
        self._editor_entry = None
        self._editor_target = None
        if entry is not None:
            entry.unbind("<FocusOut>")
            entry.destroy()
