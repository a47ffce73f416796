# zoom_engine.py
import logging
from typing import List, Optional

import config
from affine import AffineTransform, Rect
from errors import InvalidContainerSizeError

log = logging.getLogger(__name__)


class ZoomEngine:
    """
    Pan/zoom state for one page inside a container.

    Owns the live content->view transform and mutates it in place.
    Listeners get:
      - on_update(engine, transform) after every change (synchronous)
      - on_idle(engine) once changes have been quiet for idle_delay_ms

    Zoom is expressed relative to the "center inside" fit of the content,
    so zoom == 1.0 shows the whole page.
    """

    def __init__(
        self,
        loop,
        *,
        min_zoom: float = config.MIN_ZOOM,
        max_zoom: float = config.MAX_ZOOM,
        idle_delay_ms: int = config.IDLE_DELAY_MS,
    ):
        self._loop = loop
        self._matrix = AffineTransform()
        self._content_w = 0.0
        self._content_h = 0.0
        self._container_w = 0.0
        self._container_h = 0.0
        self._fit_scale = 1.0
        self._initialized = False

        self.min_zoom = float(min_zoom)
        self.max_zoom = float(max_zoom)
        self.idle_delay_ms = int(idle_delay_ms)

        self._listeners: List[object] = []
        self._idle_after_id = None

    # -----------------------------
    # Listeners
    # -----------------------------
    def add_listener(self, listener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -----------------------------
    # Sizes
    # -----------------------------
    @property
    def container_size(self):
        return self._container_w, self._container_h

    @property
    def content_size(self):
        return self._content_w, self._content_h

    def _has_sizes(self) -> bool:
        return min(self._content_w, self._content_h, self._container_w, self._container_h) > 0

    def set_content_size(self, width: float, height: float):
        width, height = float(width), float(height)
        if (width, height) == (self._content_w, self._content_h) and self._initialized:
            return
        self._content_w, self._content_h = width, height
        self._apply_fit()

    def set_container_size(self, width: float, height: float, keep_state: bool = False):
        self._container_w, self._container_h = float(width), float(height)
        if not self._has_sizes():
            return
        if keep_state and self._initialized:
            self._fit_scale = self._compute_fit_scale()
            self._clamp()
            self._dispatch_update()
        else:
            self._apply_fit()

    def _compute_fit_scale(self) -> float:
        return min(self._container_w / self._content_w, self._container_h / self._content_h)

    def fit_transform(self) -> AffineTransform:
        """Transform that centers the whole content inside the container."""
        if not self._has_sizes():
            raise InvalidContainerSizeError(
                f"Cannot fit {self._content_w}x{self._content_h} into "
                f"{self._container_w}x{self._container_h}"
            )
        s = self._compute_fit_scale()
        tx = (self._container_w - self._content_w * s) / 2.0
        ty = (self._container_h - self._content_h * s) / 2.0
        return AffineTransform.scale_translate(s, tx, ty)

    def _apply_fit(self):
        if not self._has_sizes():
            self._initialized = False
            return
        self._fit_scale = self._compute_fit_scale()
        self._matrix.copy_from(self.fit_transform())
        self._initialized = True
        self._dispatch_update()

    # -----------------------------
    # Transform access
    # -----------------------------
    def get_transform(self) -> AffineTransform:
        """The live transform. Mutated in place; copy it to keep it."""
        return self._matrix

    def set_transform(self, transform: AffineTransform):
        self._matrix.copy_from(transform)
        self._initialized = self._has_sizes()
        if self._initialized:
            self._fit_scale = self._compute_fit_scale()
        self._dispatch_update()

    @property
    def real_zoom(self) -> float:
        return self._matrix.scale_x

    @property
    def zoom(self) -> float:
        return self.real_zoom / self._fit_scale if self._fit_scale > 0 else 1.0

    @property
    def is_idle(self) -> bool:
        return self._idle_after_id is None

    # -----------------------------
    # Interaction
    # -----------------------------
    def zoom_by(self, factor: float, px: Optional[float] = None, py: Optional[float] = None):
        if not self._initialized or factor <= 0:
            return
        if px is None:
            px = self._container_w / 2.0
        if py is None:
            py = self._container_h / 2.0

        cur = self.zoom
        if cur <= 0:
            return
        target = max(self.min_zoom, min(self.max_zoom, cur * factor))
        if abs(target - cur) < 1e-9:
            return
        self._matrix.post_scale(target / cur, px, py)
        self._clamp()
        self._dispatch_update()

    def zoom_to(self, zoom: float, px: Optional[float] = None, py: Optional[float] = None):
        if not self._initialized or self.zoom <= 0:
            return
        self.zoom_by(float(zoom) / self.zoom, px, py)

    def zoom_fit(self):
        self._apply_fit()

    def pan_by(self, dx: float, dy: float):
        if not self._initialized:
            return
        self._matrix.post_translate(dx, dy)
        self._clamp()
        self._dispatch_update()

    def _clamp(self):
        bounds = self._matrix.map_rect(Rect(0.0, 0.0, self._content_w, self._content_h))
        dx = self._clamp_axis(bounds.left, bounds.right, self._container_w)
        dy = self._clamp_axis(bounds.top, bounds.bottom, self._container_h)
        if dx or dy:
            self._matrix.post_translate(dx, dy)

    @staticmethod
    def _clamp_axis(lo: float, hi: float, size: float) -> float:
        span = hi - lo
        if span <= size:
            return (size - span) / 2.0 - lo
        if lo > 0.0:
            return -lo
        if hi < size:
            return size - hi
        return 0.0

    # -----------------------------
    # Notifications
    # -----------------------------
    def _dispatch_update(self):
        for listener in list(self._listeners):
            listener.on_update(self, self._matrix)
        self._schedule_idle()

    def _schedule_idle(self):
        if self._idle_after_id is not None:
            try:
                self._loop.after_cancel(self._idle_after_id)
            except Exception:
                log.debug("after_cancel failed for idle timer", exc_info=True)
        self._idle_after_id = self._loop.after(self.idle_delay_ms, self._fire_idle)

    def _fire_idle(self):
        self._idle_after_id = None
        for listener in list(self._listeners):
            listener.on_idle(self)

    # -----------------------------
    # Scrollbar queries
    # -----------------------------
    def compute_horizontal_scroll_range(self) -> int:
        return int(round(self._content_w * self.real_zoom))

    def compute_horizontal_scroll_offset(self) -> int:
        return max(0, int(round(-self._matrix.c)))

    def compute_vertical_scroll_range(self) -> int:
        return int(round(self._content_h * self.real_zoom))

    def compute_vertical_scroll_offset(self) -> int:
        return max(0, int(round(-self._matrix.f)))
