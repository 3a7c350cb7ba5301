"""Reusable Tk helpers shared by the editor shell."""

from __future__ import annotations

from erd_editor.gui_kit.error_contract import editor_error
from erd_editor.gui_kit.error_surface import ErrorSurface

__all__ = ["ErrorSurface", "editor_error"]
