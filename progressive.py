# progressive.py
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import config
import resolution
from affine import AffineTransform
from errors import (
    InvalidContainerSizeError,
    SourceUnavailableError,
    ViewerError,
)
from rasterizers import rasterizer_for
from render_scheduler import BASE, DETAIL, RenderScheduler, RenderTicket
from rendered_image import RenderedImage

log = logging.getLogger(__name__)


@dataclass
class Display:
    """What the host should draw: bitmap placed in the view by `matrix`."""
    bitmap: Optional[object] = None
    matrix: AffineTransform = field(default_factory=AffineTransform)
    kind: Optional[str] = None


class ProgressiveRenderer:
    """
    Two-slot progressive renderer on top of a ZoomEngine.

      - base:   wide coverage, refreshed on resize (fit-to-container render)
      - detail: exact current viewport, refreshed whenever the engine goes idle

    Transform updates only reselect and re-place a cached bitmap. Rendering
    always happens in a job queued on the host loop via RenderScheduler.
    """

    def __init__(
        self,
        engine,
        loop,
        *,
        rasterizer=None,
        on_display: Optional[Callable[[Display], None]] = None,
        page_index: int = config.PDF_PAGE_INDEX,
        render_delay_ms: int = config.RENDER_DELAY_MS,
    ):
        self.engine = engine
        self.rasterizer = rasterizer
        self._injected_rasterizer = rasterizer
        self.on_display = on_display
        self.page_index = int(page_index)

        self.base = RenderedImage("base")
        self.detail = RenderedImage("detail")
        self.scheduler = RenderScheduler(loop, self._run_job, delay_ms=render_delay_ms)

        self.display = Display()

        self._source: Optional[Callable[[], object]] = None
        self._document = None
        self._page = None
        self._width = 0
        self._height = 0

        engine.add_listener(self)

    # -----------------------------
    # Source
    # -----------------------------
    @property
    def has_source(self) -> bool:
        return self._page is not None

    @property
    def page_size(self):
        if self._page is None:
            return (0.0, 0.0)
        return (self._page.width, self._page.height)

    def set_source(self, supplier: Callable[[], object]):
        """
        Use `supplier()` as the document handle. Both slots are reset and
        the page size is pushed to the engine. Open failures propagate and
        leave the current document and display untouched.
        """
        self._swap_source(supplier, self.rasterizer)

    def set_file(self, path):
        """Open `path`, picking the rasterizer by extension unless one was injected."""
        rasterizer = self._injected_rasterizer or rasterizer_for(path)
        self._swap_source(lambda: path, rasterizer)

    def _swap_source(self, supplier: Callable[[], object], rasterizer):
        document, page = self._open_page(supplier, rasterizer)

        self._reset_slots()
        self._close_document()
        self.rasterizer = rasterizer
        self._source = supplier
        self._document = document
        self._page = page

        self.engine.set_content_size(page.width, page.height)
        log.info("source set: page %d is %.1fx%.1f", self.page_index, page.width, page.height)
        self.scheduler.schedule(DETAIL)

    def _open_page(self, supplier, rasterizer):
        if supplier is None:
            raise SourceUnavailableError("No document source configured")
        if rasterizer is None:
            raise SourceUnavailableError("No rasterizer configured")
        document = rasterizer.open_document(supplier())
        try:
            page = document.open_page(self.page_index)
        except Exception:
            document.close()
            raise
        return document, page

    def _close_document(self):
        if self._document is not None:
            try:
                self._document.close()
            except Exception:
                log.warning("closing document failed", exc_info=True)
        self._document = None
        self._page = None

    def close(self):
        self.scheduler.cancel()
        self._close_document()
        self.engine.remove_listener(self)

    def _reset_slots(self):
        self.scheduler.cancel()
        self.base.clear()
        self.detail.clear()
        self.base.release_buffers()
        self.detail.release_buffers()
        self._clear_display()

    # -----------------------------
    # Engine listener
    # -----------------------------
    def on_update(self, engine, transform: AffineTransform):
        self.show_best_image()

    def on_idle(self, engine):
        if self._valid_size() and self.has_source:
            self.scheduler.schedule(DETAIL)

    # -----------------------------
    # Container
    # -----------------------------
    def _valid_size(self) -> bool:
        return self._width > 0 and self._height > 0

    def on_container_resized(self, width: int, height: int):
        width, height = int(width), int(height)
        self._width, self._height = width, height

        if not self._valid_size():
            log.debug("container %dx%d: nothing to display", width, height)
            self.scheduler.cancel()
            self.base.clear()
            self.detail.clear()
            self._clear_display()
            self.engine.set_container_size(width, height, keep_state=True)
            return

        for slot in (self.base, self.detail):
            if slot.size != (width, height):
                slot.release_buffers()

        self.engine.set_container_size(width, height, keep_state=True)
        if self.has_source:
            self.scheduler.schedule(BASE)

    # -----------------------------
    # Display selection
    # -----------------------------
    def _clear_display(self):
        self.display.bitmap = None
        self.display.kind = None
        self._notify_display()

    def _notify_display(self):
        if self.on_display is not None:
            self.on_display(self.display)

    def show_best_image(self):
        """Reselect base/detail for the live transform and update the display."""
        if not self._valid_size():
            return
        live = self.engine.get_transform()
        try:
            image = resolution.select_image(live, self._width, self._height, self.base, self.detail)
        except ViewerError as e:
            log.warning("keeping previous display: %s", e)
            return
        self._show(image)

    def _show(self, image: RenderedImage):
        # in place: runs on every gesture tick
        resolution.placement_matrix(self.engine.get_transform(), image, out=self.display.matrix)
        self.display.bitmap = image.bitmap
        self.display.kind = DETAIL if image is self.detail else BASE
        log.debug("showing %s image", self.display.kind)
        self._notify_display()

    # -----------------------------
    # Render jobs
    # -----------------------------
    def _run_job(self, ticket: RenderTicket):
        try:
            if ticket.kind == DETAIL:
                self._render_detail(ticket)
            else:
                self._render_base(ticket)
        except InvalidContainerSizeError:
            self._clear_display()
        except ViewerError as e:
            log.warning("%s render aborted: %s", ticket.kind, e)
        except Exception:
            # rasterizer backends may raise their own types; never take down the loop
            log.exception("%s render failed", ticket.kind)

    def _require_page(self):
        if self._page is None:
            raise SourceUnavailableError("No document source configured")
        return self._page

    def _require_size(self):
        if not self._valid_size():
            raise InvalidContainerSizeError(f"Container is {self._width}x{self._height}")
        return self._width, self._height

    def _render_detail(self, ticket: RenderTicket):
        width, height = self._require_size()
        page = self._require_page()

        # one snapshot for the whole job
        snapshot = self.engine.get_transform().copy()
        snapshot.invert()  # raises SingularTransformError before any buffer is touched

        committed = self.detail.render_into(
            width, height,
            lambda buf: page.render(buf, snapshot),
            transform=snapshot,
            accept=lambda: self.scheduler.is_current(ticket),
        )
        if not committed:
            return

        if self.detail.covers_area_of(self.base):
            log.debug("promoting detail to base")
            self.detail.copy_into(self.base)
        self.show_best_image()

    def _render_base(self, ticket: RenderTicket):
        width, height = self._require_size()
        page = self._require_page()

        fit = self.engine.fit_transform()
        committed = self.base.render_into(
            width, height,
            lambda buf: page.render(buf, fit),
            transform=fit,
            accept=lambda: self.scheduler.is_current(ticket),
        )
        if committed:
            self.show_best_image()

    # -----------------------------
    # Scroll pass-throughs
    # -----------------------------
    def compute_horizontal_scroll_range(self) -> int:
        return self.engine.compute_horizontal_scroll_range()

    def compute_horizontal_scroll_offset(self) -> int:
        return self.engine.compute_horizontal_scroll_offset()

    def compute_vertical_scroll_range(self) -> int:
        return self.engine.compute_vertical_scroll_range()

    def compute_vertical_scroll_offset(self) -> int:
        return self.engine.compute_vertical_scroll_offset()
