"""
Tests for ZoomEngine: fitting, zoom/pan clamping, listener notifications.
"""
import pytest

from affine import AffineTransform, Rect
from errors import InvalidContainerSizeError


class Listener:
    def __init__(self):
        self.updates = []
        self.idles = 0

    def on_update(self, engine, transform):
        self.updates.append(transform.copy())

    def on_idle(self, engine):
        self.idles += 1


@pytest.fixture
def listener(engine):
    lst = Listener()
    engine.add_listener(lst)
    return lst


@pytest.fixture
def fitted(engine):
    engine.set_container_size(500, 800)
    engine.set_content_size(1000, 1600)
    return engine


class TestFit:

    def test_center_inside_fit(self, fitted):
        assert fitted.get_transform() == AffineTransform.scale_translate(0.5, 0, 0)
        assert fitted.zoom == pytest.approx(1.0)
        assert fitted.real_zoom == pytest.approx(0.5)

    def test_fit_centers_short_axis(self, engine):
        engine.set_container_size(500, 500)
        engine.set_content_size(1000, 500)
        assert engine.get_transform() == AffineTransform.scale_translate(0.5, 0, 125)

    def test_fit_needs_both_sizes(self, engine, listener):
        engine.set_content_size(1000, 1600)
        assert listener.updates == []
        with pytest.raises(InvalidContainerSizeError):
            engine.fit_transform()

    def test_container_resize_keeps_state(self, fitted):
        fitted.zoom_by(2.0)
        before = fitted.get_transform().copy()
        fitted.set_container_size(500, 800, keep_state=True)
        assert fitted.get_transform() == before

    def test_container_resize_without_keep_state_refits(self, fitted):
        fitted.zoom_by(2.0)
        fitted.set_container_size(250, 400)
        assert fitted.get_transform() == AffineTransform.scale_translate(0.25, 0, 0)

    def test_zero_container_is_ignored(self, fitted, listener):
        before = fitted.get_transform().copy()
        fitted.set_container_size(0, 0, keep_state=True)
        assert listener.updates == []
        assert fitted.get_transform() == before


class TestInteraction:

    def test_zoom_around_pivot(self, fitted):
        fitted.zoom_by(2.0, 100, 100)
        t = fitted.get_transform()
        assert fitted.zoom == pytest.approx(2.0)
        # content point under the pivot stays put
        assert t.map_point(200, 200) == pytest.approx((100, 100))

    def test_zoom_is_clamped(self, fitted):
        fitted.zoom_by(1000.0)
        assert fitted.zoom == pytest.approx(fitted.max_zoom)
        fitted.zoom_to(0.01)
        assert fitted.zoom == pytest.approx(fitted.min_zoom)

    def test_zoomed_out_content_is_centered(self, fitted):
        fitted.zoom_to(0.5, 0, 0)
        bounds = fitted.get_transform().map_rect(Rect(0, 0, 1000, 1600))
        assert bounds.left == pytest.approx(125)
        assert bounds.top == pytest.approx(200)

    def test_pan_is_clamped_to_edges(self, fitted):
        fitted.zoom_by(2.0, 0, 0)
        fitted.pan_by(300, 300)
        t = fitted.get_transform()
        assert (t.c, t.f) == (0.0, 0.0)
        fitted.pan_by(-10000, -10000)
        bounds = fitted.get_transform().map_rect(Rect(0, 0, 1000, 1600))
        assert bounds.right == pytest.approx(500)
        assert bounds.bottom == pytest.approx(800)

    def test_live_transform_is_mutated_in_place(self, fitted):
        live = fitted.get_transform()
        fitted.zoom_by(2.0)
        assert fitted.get_transform() is live

    def test_zero_scale_transform_ignores_zoom(self, fitted, listener):
        fitted.set_transform(AffineTransform(0, 0, 10, 0, 0, 20))
        listener.updates.clear()
        assert fitted.zoom == 0
        fitted.zoom_by(2.0)
        fitted.zoom_to(3.0)
        assert listener.updates == []
        assert fitted.get_transform() == AffineTransform(0, 0, 10, 0, 0, 20)

    def test_uninitialized_engine_ignores_gestures(self, engine, listener):
        engine.zoom_by(2.0)
        engine.pan_by(5, 5)
        assert listener.updates == []


class TestNotifications:

    def test_update_on_every_change_idle_once(self, fitted, listener, loop):
        loop.run_all()
        listener.updates.clear()
        listener.idles = 0

        fitted.pan_by(0, -10)
        fitted.zoom_by(1.5)
        fitted.pan_by(0, -10)
        assert len(listener.updates) == 3
        assert listener.idles == 0
        loop.run_all()
        assert listener.idles == 1

    def test_idle_waits_for_quiet_period(self, fitted, listener, loop):
        loop.run_all()
        listener.idles = 0
        fitted.zoom_by(2.0)
        loop.now += fitted.idle_delay_ms - 1
        loop.run_due()
        assert listener.idles == 0
        loop.now += 1
        loop.run_due()
        assert listener.idles == 1

    def test_remove_listener(self, fitted, listener):
        fitted.remove_listener(listener)
        fitted.zoom_by(2.0)
        assert listener.updates == []


class TestScroll:

    def test_ranges_and_offsets(self, fitted):
        assert fitted.compute_horizontal_scroll_range() == 500
        assert fitted.compute_vertical_scroll_range() == 800
        fitted.zoom_by(2.0, 0, 0)
        fitted.pan_by(-100, -50)
        assert fitted.compute_horizontal_scroll_range() == 1000
        assert fitted.compute_horizontal_scroll_offset() == 100
        assert fitted.compute_vertical_scroll_offset() == 50
