from dataclasses import dataclass

from grid import Point

ZOOM_MIN = 0.1
ZOOM_MAX = 10.0
ZOOM_STEP = 1.1
ZOOM_BUTTON_STEP = 0.1
FIT_MARGIN = 0.9


@dataclass
class Viewport:
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


def clamp_zoom(zoom):
    return min(max(zoom, ZOOM_MIN), ZOOM_MAX)


def screen_to_world(sx, sy, viewport):
    return Point((sx - viewport.x) / viewport.zoom, (sy - viewport.y) / viewport.zoom)


def world_to_screen(wx, wy, viewport):
    return Point(wx * viewport.zoom + viewport.x, wy * viewport.zoom + viewport.y)


def pan(viewport, dx, dy):
    return Viewport(viewport.x + dx, viewport.y + dy, viewport.zoom)


def zoom_at(viewport, sx, sy, zoom_in=True):
    """
    Zooms one wheel step about a screen point, keeping the world point under it fixed.
    """
    factor = ZOOM_STEP if zoom_in else 1 / ZOOM_STEP
    new_zoom = clamp_zoom(viewport.zoom * factor)
    world = screen_to_world(sx, sy, viewport)
    return Viewport(sx - world.x * new_zoom, sy - world.y * new_zoom, new_zoom)


def fit_image(image_w, image_h, view_w, view_h, margin=FIT_MARGIN):
    """
    Viewport that shows a whole image centered in the view, never above 100% zoom.
    """
    if image_w <= 0 or image_h <= 0 or view_w <= 0 or view_h <= 0:
        return Viewport()
    zoom = min(view_w / image_w, view_h / image_h, 1) * margin
    return Viewport((view_w - image_w * zoom) / 2, (view_h - image_h * zoom) / 2, zoom)
