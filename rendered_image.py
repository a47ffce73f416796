# rendered_image.py
import logging
from typing import Callable, Optional

from PIL import Image

from affine import AffineTransform, Rect, EMPTY_RECT


log = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)

STATE_EMPTY = "empty"
STATE_RENDERING = "rendering"
STATE_READY = "ready"


class RenderedImage:
    """
    One cached raster of the page plus the transform it was rendered with.

    Derived state (inverse_transform, view_port) is recomputed in update()
    and nowhere else, so the pair can never be observed out of sync with
    bitmap/transform.

    Rendering goes through a scratch buffer that swaps with the committed
    bitmap on success (double buffering): the visible bitmap is never
    cleared or half-drawn by a render that later fails.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._bitmap: Optional[Image.Image] = None
        self._transform = AffineTransform()
        self._inverse = AffineTransform()
        self._view_port: Rect = EMPTY_RECT
        self._scratch: Optional[Image.Image] = None
        self._rendering = False

    # -----------------------------
    # Read-only views
    # -----------------------------
    @property
    def bitmap(self) -> Optional[Image.Image]:
        return self._bitmap

    @property
    def transform(self) -> AffineTransform:
        return self._transform

    @property
    def inverse_transform(self) -> AffineTransform:
        return self._inverse

    @property
    def view_port(self) -> Rect:
        return self._view_port

    @property
    def state(self) -> str:
        if self._rendering:
            return STATE_RENDERING
        return STATE_READY if self._bitmap is not None else STATE_EMPTY

    @property
    def size(self):
        return self._bitmap.size if self._bitmap is not None else (0, 0)

    # -----------------------------
    # Mutation
    # -----------------------------
    _KEEP = object()

    def update(self, bitmap=_KEEP, transform: Optional[AffineTransform] = None) -> Rect:
        """
        Replace bitmap and/or transform and return the recomputed view port.

        The inverse is computed before anything is assigned: a singular
        transform raises SingularTransformError and leaves this image as it was.
        """
        new_bitmap = self._bitmap if bitmap is RenderedImage._KEEP else bitmap
        new_transform = self._transform if transform is None else transform

        inverse = new_transform.invert()
        if new_bitmap is not None:
            bw, bh = new_bitmap.size
            view_port = inverse.map_rect(Rect(0.0, 0.0, float(bw), float(bh)))
        else:
            view_port = EMPTY_RECT

        self._bitmap = new_bitmap
        self._transform.copy_from(new_transform)
        self._inverse.copy_from(inverse)
        self._view_port = view_port
        return view_port

    def set_bitmap(self, bitmap: Optional[Image.Image]) -> Rect:
        return self.update(bitmap=bitmap)

    def set_transform(self, transform: AffineTransform) -> Rect:
        # copied by value in update(); caller keeps ownership of `transform`
        return self.update(transform=transform)

    def clear(self):
        self._bitmap = None
        self._transform.set(1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
        self._inverse.set(1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
        self._view_port = EMPTY_RECT

    def release_buffers(self):
        """Drop the scratch buffer so the next render allocates at the new size."""
        self._scratch = None

    # -----------------------------
    # Rendering
    # -----------------------------
    def _acquire_buffer(self, width: int, height: int) -> Image.Image:
        buf = self._scratch
        if buf is not None and buf.size == (width, height):
            buf.paste(TRANSPARENT, (0, 0, width, height))
            return buf
        buf = Image.new("RGBA", (width, height), TRANSPARENT)
        self._scratch = buf
        return buf

    def render_into(
        self,
        width: int,
        height: int,
        render_fn: Callable[[Image.Image], None],
        transform: Optional[AffineTransform] = None,
        accept: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """
        Fill a cleared width x height buffer with render_fn and commit it.

        `transform` (if given) is committed together with the buffer.
        `accept` is asked right before committing; returning False drops
        the result. Returns True when something was committed. Exceptions
        from render_fn propagate and nothing is committed.
        """
        buf = self._acquire_buffer(int(width), int(height))
        self._rendering = True
        try:
            render_fn(buf)
        finally:
            self._rendering = False

        if accept is not None and not accept():
            log.debug("%s: discarding stale render", self.name or "image")
            return False

        previous = self._bitmap
        self.update(bitmap=buf, transform=transform)
        # old bitmap becomes the next scratch buffer
        self._scratch = previous
        return True

    def copy_into(self, other: "RenderedImage") -> Rect:
        """Deep-copy raster and transform into `other` (no shared buffers)."""
        src = self._bitmap
        if src is None:
            return other.update(bitmap=None, transform=self._transform)

        dst = other._bitmap
        if dst is not None and dst is not src and dst.size == src.size and dst.mode == src.mode:
            dst.paste(src, (0, 0))
        else:
            dst = src.copy()
        return other.update(bitmap=dst, transform=self._transform)

    # -----------------------------
    # Coverage rules
    # -----------------------------
    def covers_area_of(self, other: "RenderedImage") -> bool:
        return self._view_port.is_bigger_than(other._view_port)

    def contains(self, rect: Rect) -> bool:
        return self._bitmap is not None and self._view_port.contains(rect)

    def __repr__(self):
        return f"RenderedImage({self.name!r}, state={self.state}, view_port={self._view_port.as_tuple()})"
