"""
Tests for camera module.

Run with: pytest tests/test_camera.py -v
"""

import pytest

from camera import (
    ZOOM_MAX,
    ZOOM_MIN,
    Viewport,
    clamp_zoom,
    fit_image,
    pan,
    screen_to_world,
    world_to_screen,
    zoom_at,
)


class TestTransforms:
    """Tests for screen/world conversion."""

    def test_identity_viewport(self):
        assert screen_to_world(10, 20, Viewport()) == (10, 20)

    def test_round_trip(self):
        vp = Viewport(x=-35, y=12.5, zoom=2.5)
        w = screen_to_world(100, 80, vp)
        s = world_to_screen(w.x, w.y, vp)
        assert s.x == pytest.approx(100)
        assert s.y == pytest.approx(80)

    def test_pan(self):
        assert pan(Viewport(1, 2, 3), 10, -5) == Viewport(11, -3, 3)


class TestZoom:
    """Tests for zooming."""

    def test_clamp(self):
        assert clamp_zoom(0.01) == ZOOM_MIN
        assert clamp_zoom(50) == ZOOM_MAX
        assert clamp_zoom(1.5) == 1.5

    @pytest.mark.parametrize("zoom_in", [True, False])
    def test_cursor_point_stays_fixed(self, zoom_in):
        vp = Viewport(x=40, y=-20, zoom=1.3)
        before = screen_to_world(250, 175, vp)
        after_vp = zoom_at(vp, 250, 175, zoom_in=zoom_in)
        after = screen_to_world(250, 175, after_vp)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)
        assert (after_vp.zoom > vp.zoom) == zoom_in

    def test_zoom_stays_in_range(self):
        vp = Viewport()
        for _ in range(100):
            vp = zoom_at(vp, 0, 0, zoom_in=True)
        assert vp.zoom == ZOOM_MAX
        for _ in range(200):
            vp = zoom_at(vp, 0, 0, zoom_in=False)
        assert vp.zoom == ZOOM_MIN


class TestFit:
    """Tests for fitting an image into the view."""

    def test_large_image_is_centered(self):
        vp = fit_image(2000, 1000, 1000, 800)
        assert vp.zoom == pytest.approx(0.45)
        assert vp.x == pytest.approx((1000 - 2000 * 0.45) / 2)
        assert vp.y == pytest.approx((800 - 1000 * 0.45) / 2)

    def test_small_image_not_enlarged(self):
        vp = fit_image(100, 100, 1000, 800)
        assert vp.zoom == pytest.approx(0.9)

    def test_degenerate_sizes(self):
        assert fit_image(0, 100, 800, 600) == Viewport()
        assert fit_image(100, 100, 0, 0) == Viewport()
