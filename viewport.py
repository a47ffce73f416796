# viewport.py
import logging
import tkinter as tk
from tkinter import ttk
from typing import Optional

from PIL import Image, ImageTk

import config
from errors import ViewerError
from progressive import Display, ProgressiveRenderer
from zoom_engine import ZoomEngine

log = logging.getLogger(__name__)


class ViewportCanvas(ttk.Frame):
    """
    Pan/zoom page view backed by a ProgressiveRenderer.

    The canvas only ever shows one container-sized image: the currently
    selected cached raster (base or detail), warped by the display matrix.
    While dragging, the warp uses NEAREST so it keeps up with the pointer;
    the sharp re-render arrives once the engine reports idle.
    """

    def __init__(self, parent, *, bg: str = config.CANVAS_BG):
        super().__init__(parent)
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        # Canvas + scrollbars
        self.canvas = tk.Canvas(self, bg=bg, highlightthickness=0)
        self.canvas.grid(row=0, column=0, sticky="nsew")

        self._xsb = ttk.Scrollbar(self, orient="horizontal", command=self._on_xscrollbar)
        self._ysb = ttk.Scrollbar(self, orient="vertical", command=self._on_yscrollbar)
        self._xsb.grid(row=1, column=0, sticky="ew")
        self._ysb.grid(row=0, column=1, sticky="ns")

        # Engine + renderer use this widget's after() as their loop
        self.engine = ZoomEngine(self)
        self.renderer = ProgressiveRenderer(self.engine, self, on_display=self._on_display)

        self._canvas_image_id: Optional[int] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None

        # Interaction state
        self._is_dragging = False
        self._last_xy = None
        self._redraw_after_id = None
        self._pending_display: Optional[Display] = None

        # Resampling while dragging vs settled
        self._drag_resample = Image.NEAREST
        self._idle_resample = Image.BILINEAR

        # Callback for status line updates (set by the app)
        self.on_view_changed = None

        self.canvas.bind("<Configure>", self._on_configure)

    # -----------------------------
    # Public API
    # -----------------------------
    def set_file(self, path):
        self.renderer.set_file(path)

    def set_zoom(self, z: float):
        self.engine.zoom_to(z)

    def get_zoom(self) -> float:
        return float(self.engine.zoom)

    def zoom_fit(self):
        self.engine.zoom_fit()

    def current_bitmap(self) -> Optional[Image.Image]:
        return self.renderer.display.bitmap

    def displayed_kind(self) -> Optional[str]:
        return self.renderer.display.kind

    def wheel_zoom(self, canvas_x: int, canvas_y: int, delta):
        try:
            d = float(delta)
        except (TypeError, ValueError):
            d = 0.0
        if abs(d) < 1e-9:
            return

        # Linux (+1/-1)
        if abs(d) == 1.0:
            d = 120.0 if d > 0 else -120.0

        self.engine.zoom_by(config.WHEEL_ZOOM_BASE ** (d / 120.0), float(canvas_x), float(canvas_y))

    # -----------------------------
    # Pan
    # -----------------------------
    def pan_begin(self, x: int, y: int):
        if not self.renderer.has_source:
            return
        self._is_dragging = True
        self._last_xy = (x, y)

    def pan_move(self, x: int, y: int):
        if not self._is_dragging or self._last_xy is None:
            return
        lx, ly = self._last_xy
        self._last_xy = (x, y)
        self.engine.pan_by(x - lx, y - ly)

    def pan_end(self):
        if not self._is_dragging:
            return
        self._is_dragging = False
        self._last_xy = None
        # redraw the current selection with the smooth filter
        self._schedule_redraw(self.renderer.display)

    # -----------------------------
    # Display
    # -----------------------------
    def _on_display(self, display: Display):
        # coalesce bursts of updates into one canvas redraw per loop turn
        self._schedule_redraw(display)

    def _schedule_redraw(self, display: Display):
        self._pending_display = display
        if self._redraw_after_id is None:
            self._redraw_after_id = self.after_idle(self._redraw_now)

    def _redraw_now(self):
        self._redraw_after_id = None
        display = self._pending_display
        self._pending_display = None
        if display is None:
            return

        cw = self.canvas.winfo_width()
        ch = self.canvas.winfo_height()
        if display.bitmap is None or cw <= 0 or ch <= 0:
            self._clear_canvas()
        else:
            self._draw_bitmap(display, cw, ch)

        self._update_scrollbars()
        if self.on_view_changed is not None:
            self.on_view_changed()

    def _draw_bitmap(self, display: Display, cw: int, ch: int):
        try:
            inv = display.matrix.invert()
        except ViewerError as e:
            log.warning("cannot place bitmap: %s", e)
            return

        resample = self._drag_resample if self._is_dragging else self._idle_resample
        frame = display.bitmap.transform((cw, ch), Image.AFFINE, inv.coefficients(), resample=resample)
        self._tk_image = ImageTk.PhotoImage(frame)

        if self._canvas_image_id is None:
            self._canvas_image_id = self.canvas.create_image(0, 0, anchor="nw", image=self._tk_image)
        else:
            self.canvas.itemconfig(self._canvas_image_id, image=self._tk_image, state="normal")

    def _clear_canvas(self):
        if self._canvas_image_id is not None:
            self.canvas.itemconfigure(self._canvas_image_id, state="hidden")
        self._tk_image = None

    # -----------------------------
    # Scrollbars
    # -----------------------------
    def _update_scrollbars(self):
        cw = max(1, self.canvas.winfo_width())
        ch = max(1, self.canvas.winfo_height())
        self._xsb.set(*self._scroll_fractions(
            self.renderer.compute_horizontal_scroll_offset(),
            self.renderer.compute_horizontal_scroll_range(), cw))
        self._ysb.set(*self._scroll_fractions(
            self.renderer.compute_vertical_scroll_offset(),
            self.renderer.compute_vertical_scroll_range(), ch))

    def _scroll_fractions(self, offset: int, total: int, visible: int):
        if total <= 0:
            return 0.0, 1.0
        lo = self._clamp01(offset / float(total))
        hi = self._clamp01((offset + visible) / float(total))
        return lo, hi

    def _on_xscrollbar(self, *args):
        delta = self._scrollbar_delta(args, self.canvas.winfo_width(),
                                      self.renderer.compute_horizontal_scroll_offset(),
                                      self.renderer.compute_horizontal_scroll_range())
        if delta:
            self.engine.pan_by(-delta, 0.0)

    def _on_yscrollbar(self, *args):
        delta = self._scrollbar_delta(args, self.canvas.winfo_height(),
                                      self.renderer.compute_vertical_scroll_offset(),
                                      self.renderer.compute_vertical_scroll_range())
        if delta:
            self.engine.pan_by(0.0, -delta)

    @staticmethod
    def _scrollbar_delta(args, visible: int, offset: int, total: int) -> float:
        """Translate a Tk scrollbar command into a scroll offset change (px)."""
        if not args or total <= 0:
            return 0.0
        if args[0] == "moveto":
            return float(args[1]) * total - offset
        if args[0] == "scroll":
            n = int(args[1])
            step = visible * 0.9 if args[2] == "pages" else 40
            return n * step
        return 0.0

    def _on_configure(self, event):
        self.renderer.on_container_resized(event.width, event.height)

    # -----------------------------
    # Misc helpers
    # -----------------------------
    @staticmethod
    def _clamp01(v: float) -> float:
        if v < 0.0:
            return 0.0
        if v > 1.0:
            return 1.0
        return v
