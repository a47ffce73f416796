# app.py
import argparse
import logging
import os
import tkinter as tk
from tkinter import ttk
from typing import Optional

import actions
import config
import ui_controls
from input_controller import InputController

from viewport import ViewportCanvas

log = logging.getLogger(__name__)


class PageViewerApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title(config.WINDOW_TITLE)
        self.geometry(config.WINDOW_GEOMETRY)

        self.current_path: Optional[str] = None
        self._controls_win: Optional[tk.Toplevel] = None

        # Build UI (widgets + viewport)
        ui_controls.build_ui(self)
        self.viewport.on_view_changed = self.set_status

        # Install input controller (all bindings live there)
        self.input = InputController(self, self.viewport)
        self.input.install()

        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # -------------------------------------------------
    # Viewport creation hook (used by ui_controls)
    # -------------------------------------------------
    def _create_viewport(self, parent):
        return ViewportCanvas(parent)

    # -----------------------------
    # Actions (delegated)
    # -----------------------------
    def open_document(self, path=None):
        return actions.open_document(self, path)

    def export_view(self):
        actions.export_view(self)

    def show_controls(self):
        # Re-focus existing window if already open
        if self._controls_win is not None and self._controls_win.winfo_exists():
            self._controls_win.deiconify()
            self._controls_win.lift()
            self._controls_win.focus_force()
            return

        win = tk.Toplevel(self)
        self._controls_win = win
        win.title("Controls")
        win.resizable(False, False)
        win.transient(self)

        def _on_close():
            win.destroy()
            self._controls_win = None

        win.protocol("WM_DELETE_WINDOW", _on_close)

        frm = ttk.Frame(win, padding=12)
        frm.pack(fill="both", expand=True)

        ttk.Label(frm, text="Controls", font=("Segoe UI", 11, "bold")).pack(anchor="w")
        ttk.Separator(frm).pack(fill="x", pady=(8, 10))

        lines = [
            "Pan: Left-click + drag",
            "Zoom: Mouse wheel (around pointer), + / -",
            "Fit: Fit button or 0",
            "The page sharpens once you stop moving.",
        ]
        ttk.Label(frm, text="\n".join(lines), justify="left").pack(anchor="w")

        ttk.Separator(frm).pack(fill="x", pady=(10, 10))

        btn_row = ttk.Frame(frm)
        btn_row.pack(fill="x")
        ttk.Button(btn_row, text="Close", command=_on_close).pack(side="right")

        # Position near the main window
        self.update_idletasks()
        x = self.winfo_rootx() + 40
        y = self.winfo_rooty() + 40
        win.geometry(f"+{x}+{y}")

        win.lift()
        win.focus_force()

    # -----------------------------
    # Status helper
    # -----------------------------
    def set_status(self, extra: str = ""):
        renderer = self.viewport.renderer
        if self.current_path is None or not renderer.has_source:
            self.info_var.set("Open a PDF or image to begin.")
            return

        base = os.path.basename(self.current_path)
        pw, ph = renderer.page_size
        shown = self.viewport.displayed_kind() or "nothing"
        self.info_var.set(
            f"{base} | page {pw:.0f}×{ph:.0f} | zoom {self.viewport.get_zoom():.2f}× | showing {shown}{extra}"
        )

    # -----------------------------
    # Zoom
    # -----------------------------
    def _on_zoom_slider(self):
        self.viewport.set_zoom(float(self.zoom_var.get() or 1.0))

    def zoom_fit(self):
        self.viewport.zoom_fit()
        self.zoom_var.set(self.viewport.get_zoom())

    def _on_close(self):
        self.viewport.renderer.close()
        self.destroy()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Progressive pan/zoom viewer for PDF pages and images.")
    parser.add_argument("path", nargs="?", help="document to open on start")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default: $%s)" % config.LOG_LEVEL_ENV)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config.setup_logging(args.log_level)
    log.debug("starting with %s", args)

    app = PageViewerApp()
    if args.path:
        # open once the main loop is running
        app.after_idle(lambda: app.open_document(args.path))
    app.mainloop()


if __name__ == "__main__":
    main()
