# To run:
# python -m erd_editor.main


import logging
import traceback
import tkinter as tk
from tkinter import ttk

from erd_editor.config import AppConfig
from erd_editor.logging_setup import setup_logging
from erd_editor.gui_tools.erd_editor_view import ERDEditorToolFrame

logger = logging.getLogger("main")


def main() -> int:
    cfg = AppConfig()

    setup_logging(cfg.log_level)
    logger.info("ER editor booting...")

    try:
        root = tk.Tk()
        root.title("ER Diagram Editor")
        root.geometry(f"{cfg.canvas_width}x{cfg.canvas_height}")
        ttk.Style().theme_use("clam")
        editor = ERDEditorToolFrame(root, cfg)
        editor.pack(fill="both", expand=True)
        root.report_callback_exception = editor.report_callback_exception
        root.mainloop()
        return 0
    except Exception as exc:
        logger.error("Unhandled error: %s", exc)
        if cfg.debug:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
