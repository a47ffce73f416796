# resolution.py
"""
Picks which cached raster to show for the live transform.

Everything here is pure: no rendering, no allocation beyond the small
result objects, so it is safe to call on every gesture tick.
"""
from dataclasses import dataclass
from typing import Optional

from affine import AffineTransform, Rect
from rendered_image import RenderedImage
from render_scheduler import BASE, DETAIL


@dataclass
class Selection:
    image: RenderedImage
    matrix: AffineTransform
    kind: str


def visible_rect(live: AffineTransform, width: float, height: float) -> Rect:
    """Content-space rectangle currently visible in a width x height container."""
    return live.invert().map_rect(Rect(0.0, 0.0, float(width), float(height)))


def select_image(live: AffineTransform, width, height, base: RenderedImage, detail: RenderedImage) -> RenderedImage:
    if detail.contains(visible_rect(live, width, height)):
        return detail
    return base


def placement_matrix(live: AffineTransform, image: RenderedImage,
                     out: Optional[AffineTransform] = None) -> AffineTransform:
    """Bitmap pixels -> view pixels: the image's inverse, then the live transform."""
    if out is None:
        out = AffineTransform()
    return out.set_concat(image.inverse_transform, live)


def select(live, width, height, base, detail, out: Optional[AffineTransform] = None) -> Selection:
    image = select_image(live, width, height, base, detail)
    kind = DETAIL if image is detail else BASE
    return Selection(image, placement_matrix(live, image, out), kind)
