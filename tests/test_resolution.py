"""
Tests for the base/detail selection and bitmap placement.
"""
from PIL import Image

import resolution
from affine import AffineTransform, Rect
from render_scheduler import BASE, DETAIL
from rendered_image import RenderedImage


def cached(name, size, transform):
    img = RenderedImage(name)
    img.update(bitmap=Image.new("RGBA", size), transform=transform)
    return img


def test_visible_rect():
    live = AffineTransform.scale_translate(0.5)
    assert resolution.visible_rect(live, 500, 800) == Rect(0, 0, 1000, 1600)


def test_detail_selected_when_it_covers_view():
    live = AffineTransform.scale_translate(1.0, -100, -100)
    base = cached("base", (500, 800), AffineTransform.scale_translate(0.5))
    detail = cached("detail", (500, 800), live.copy())
    assert resolution.select_image(live, 500, 800, base, detail) is detail


def test_base_selected_when_detail_falls_short():
    render = AffineTransform.scale_translate(1.0, -100, -100)
    base = cached("base", (500, 800), AffineTransform.scale_translate(0.5))
    detail = cached("detail", (500, 800), render)
    live = render.copy().post_translate(10, 0)
    assert resolution.select_image(live, 500, 800, base, detail) is base


def test_empty_detail_never_selected():
    live = AffineTransform.scale_translate(0.5)
    base = RenderedImage("base")
    detail = RenderedImage("detail")
    assert resolution.select_image(live, 500, 800, base, detail) is base


def test_placement_matrix_is_inverse_then_live():
    image = cached("detail", (100, 100), AffineTransform.scale_translate(2.0, 5, 5))
    live = AffineTransform.scale_translate(3.0, -7, 1)
    m = resolution.placement_matrix(live, image)
    assert m.almost_equals(AffineTransform.concat(image.inverse_transform, live))


def test_placement_is_identity_when_live_matches_render():
    t = AffineTransform(0.8, 0.1, 3.0, -0.2, 1.1, 4.0)
    image = cached("detail", (50, 50), t)
    assert resolution.placement_matrix(t, image).almost_equals(AffineTransform.identity())


def test_placement_writes_in_place():
    out = AffineTransform()
    image = cached("base", (10, 10), AffineTransform.scale_translate(0.5))
    result = resolution.placement_matrix(AffineTransform.scale_translate(1.0), image, out=out)
    assert result is out
    assert out.almost_equals(AffineTransform.scale_translate(2.0))


def test_select_reports_kind():
    live = AffineTransform.scale_translate(0.5)
    base = cached("base", (500, 800), AffineTransform.scale_translate(0.5))
    detail = cached("detail", (500, 800), AffineTransform.scale_translate(0.5))
    assert resolution.select(live, 500, 800, base, detail).kind == DETAIL
    live.post_scale(2.0, 250, 400)
    sel = resolution.select(live, 500, 800, base, RenderedImage())
    assert sel.kind == BASE
    assert sel.image is base
