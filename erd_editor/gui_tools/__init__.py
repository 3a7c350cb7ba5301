"""Tk views for the ER editor."""

from erd_editor.gui_tools.erd_editor_view import ERDEditorToolFrame

__all__ = ["ERDEditorToolFrame"]
