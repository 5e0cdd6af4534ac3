import logging
import math
from functools import lru_cache
from typing import NamedTuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from assets import get_definition, icon_pixels, render_icon
from grid import cell_polygon, get_distance, get_neighbors, to_cell, to_pixel
from map_state import BRUSH_TOOLS, EditorTool, HexState, NavigationMode, get_hex_key, parse_hex_key
from utils import to_rgba

log = logging.getLogger(__name__)

TERRAIN_ALPHA = 102  # 40%
TERRAIN_COLORS = {
    HexState.BLOCKED: (239, 68, 68),
    HexState.DIFFICULT: (234, 179, 8),
    HexState.WATER: (59, 130, 246),
}

TOOL_PREVIEW_COLORS = {
    EditorTool.ERASE: "#ef4444",
    EditorTool.LABEL: "#22c55e",
    EditorTool.ASSET: "#d97706",
    EditorTool.RULER: "#ec4899",
}
PAINT_PREVIEW_COLORS = {
    HexState.BLOCKED: "#ef4444",
    HexState.DIFFICULT: "#eab308",
    HexState.WATER: "#3b82f6",
}
CLEAR_PREVIEW_COLOR = "#64748b"

RULER_COLOR = "#ec4899"
FEET_PER_UNIT = 5

COORD_LABEL_RANGE = 15
VISIBLE_RANGE_MARGIN = 5
CULL_MARGIN = 100
GLOW_RADIUS = 5


class Transform(NamedTuple):
    """World to canvas mapping: canvas = world * scale + (tx, ty)."""
    scale: float
    tx: float
    ty: float

    def apply(self, x, y):
        return x * self.scale + self.tx, y * self.scale + self.ty

    def apply_all(self, points):
        return [self.apply(x, y) for x, y in points]


@lru_cache(maxsize=64)
def get_font(size):
    return ImageFont.load_default(size=max(1, int(size)))


def ruler_label(units):
    return f"{units:.1f} Units / {units * FEET_PER_UNIT:.1f}ft"


def _dashed_line(draw, p0, p1, fill, width, dash, gap):
    length = math.hypot(p1[0] - p0[0], p1[1] - p0[1])
    if length == 0:
        return
    ux, uy = (p1[0] - p0[0]) / length, (p1[1] - p0[1]) / length
    pos = 0.0
    while pos < length:
        end = min(pos + dash, length)
        draw.line([(p0[0] + ux * pos, p0[1] + uy * pos), (p0[0] + ux * end, p0[1] + uy * end)],
                  fill=fill, width=width)
        pos = end + gap


def _composite(canvas, layer):
    canvas.alpha_composite(layer)


def _blit(layer, icon, x, y):
    """alpha_composite `icon` at (x, y), clipping at the layer edges."""
    if icon is None:
        return
    left, top = max(0, -x), max(0, -y)
    if left >= icon.width or top >= icon.height or x >= layer.width or y >= layer.height:
        return
    layer.alpha_composite(icon, dest=(x + left, y + top), source=(left, top))


class DrawingMixin:
    def camera_transform(self):
        return Transform(self.viewport.zoom, self.viewport.x, self.viewport.y)

    def render_frame(self, width, height):
        """
        Composites one frame of the editor view at the current camera.
        """
        frame = Image.new("RGBA", (max(1, int(width)), max(1, int(height))), to_rgba(self.background_color))
        t = self.camera_transform()
        self.draw_background(frame, t)
        self.draw_grid_layer(frame, t, width, height, is_export=False)
        return frame

    def draw_background(self, frame, t):
        if self.image is None:
            return
        iw, ih = self.image.size
        ox, oy = self.image_origin
        fw, fh = frame.size
        # Only resample the part of the image that lands on the frame
        left = max(0, math.floor((0 - t.tx) / t.scale - ox))
        top = max(0, math.floor((0 - t.ty) / t.scale - oy))
        right = min(iw, math.ceil((fw - t.tx) / t.scale - ox))
        bottom = min(ih, math.ceil((fh - t.ty) / t.scale - oy))
        if right <= left or bottom <= top:
            return
        size = (max(1, round((right - left) * t.scale)), max(1, round((bottom - top) * t.scale)))
        try:
            part = self.image.crop((left, top, right, bottom)).resize(size, Image.Resampling.BILINEAR)
        except (ValueError, OSError) as e:
            log.error("Error resizing background: %s", e)
            return
        sx, sy = t.apply(ox + left, oy + top)
        layer = Image.new("RGBA", frame.size, (0, 0, 0, 0))
        layer.paste(part, (round(sx), round(sy)))
        _composite(frame, layer)

    def visible_cells(self, width, height, rng=None):
        config = self.config
        zoom = self.viewport.zoom
        if self.image is not None:
            ref_w, ref_h = self.image.size
            cx = self.image_origin[0] + ref_w / 2
            cy = self.image_origin[1] + ref_h / 2
        else:
            ref_w, ref_h = width / zoom, height / zoom
            cx = (width / 2 - self.viewport.x) / zoom
            cy = (height / 2 - self.viewport.y) / zoom
        center = to_cell(cx, cy, config)
        if rng is None:
            rng = math.ceil(max(ref_w, ref_h) / config.radius) + VISIBLE_RANGE_MARGIN
        return get_neighbors(center, rng, config)

    def draw_grid_layer(self, canvas, t, width, height, is_export=False):
        """
        Draws every grid-anchored layer onto `canvas` in order:
        lattice, terrain, coordinates, assets, markers, then (live view only) hover and ruler.
        """
        grid_on = is_export or self.config.show_grid
        if grid_on:
            self.draw_lattice(canvas, t, width, height)
        self.draw_terrain(canvas, t)
        if grid_on and self.config.show_coordinates:
            self.draw_coordinates(canvas, t, width, height)
        self.draw_assets(canvas, t)
        self.draw_markers(canvas, t)
        if not is_export:
            self.draw_tool_preview(canvas, t)
            self.draw_ruler(canvas, t)

    def _on_canvas(self, canvas, point, margin=CULL_MARGIN):
        w, h = canvas.size
        return -margin <= point[0] <= w + margin and -margin <= point[1] <= h + margin

    def draw_lattice(self, canvas, t, width, height):
        config = self.config
        if self.image is None and not self.map_state.hex_data:
            return
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        color = to_rgba(config.line_color)
        line_width = max(1, round(config.line_width * t.scale))
        margin = CULL_MARGIN + config.radius * 2 * t.scale
        for cell in self.visible_cells(width, height):
            if self.map_state.is_hidden(get_hex_key(*cell)):
                continue
            center, corners = cell_polygon(cell, config)
            if not self._on_canvas(canvas, t.apply(*center), margin):
                continue
            pts = t.apply_all(corners)
            draw.line(pts + [pts[0]], fill=color, width=line_width, joint="curve")
        alpha = layer.getchannel("A").point(lambda a: int(a * config.opacity))
        layer.putalpha(alpha)
        _composite(canvas, layer)

    def draw_terrain(self, canvas, t):
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for key, state in self.map_state.hex_data.items():
            color = TERRAIN_COLORS.get(state)
            if color is None:
                continue
            coord = parse_hex_key(key)
            _, corners = cell_polygon(coord, self.config)
            draw.polygon(t.apply_all(corners), fill=color + (TERRAIN_ALPHA,))
        _composite(canvas, layer)

    def draw_coordinates(self, canvas, t, width, height):
        size = self.config.radius * 0.4 * t.scale
        if size < 3:
            return
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = get_font(size)
        for cell in self.visible_cells(width, height, rng=COORD_LABEL_RANGE):
            if self.map_state.is_hidden(get_hex_key(*cell)):
                continue
            pos = t.apply(*to_pixel(cell.q, cell.r, self.config))
            if not self._on_canvas(canvas, pos):
                continue
            draw.text(pos, f"{cell.q},{cell.r}", fill=(255, 255, 255, 128), font=font, anchor="mm")
        _composite(canvas, layer)

    def draw_assets(self, canvas, t):
        if not self.map_state.assets:
            return
        strokes = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        glow = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        size = self.config.radius * 1.5 * t.scale
        for key, asset in self.map_state.assets.items():
            if self.map_state.is_hidden(key):
                continue
            definition = get_definition(asset.type)
            if definition is None:
                log.debug("No asset definition for %r at %s", asset.type, key)
                continue
            coord = parse_hex_key(key)
            cx, cy = t.apply(*to_pixel(coord.q, coord.r, self.config))
            pixels = icon_pixels(definition, size)
            icon = render_icon(definition, pixels)
            if icon is None:
                continue
            x, y = round(cx - pixels / 2), round(cy - pixels / 2)
            _blit(glow, render_icon(definition, pixels, glow=True), x, y)
            _blit(strokes, icon, x, y)
        _composite(canvas, glow.filter(ImageFilter.GaussianBlur(GLOW_RADIUS)))
        _composite(canvas, strokes)

    def draw_markers(self, canvas, t):
        if not self.map_state.markers:
            return
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        font = get_font(16 * t.scale)
        badge = 14 * t.scale
        for key, marker in self.map_state.markers.items():
            if self.map_state.is_hidden(key):
                continue
            coord = parse_hex_key(key)
            center = to_pixel(coord.q, coord.r, self.config)
            bx, by = t.apply(center.x, center.y - self.config.radius / 2)
            draw.ellipse((bx - badge, by - badge, bx + badge, by + badge), fill=(0, 0, 0, 204),
                         outline=(255, 255, 255, 255), width=max(1, round(2 * t.scale)))
            draw.text((bx, by + 2 * t.scale), marker.text, fill=to_rgba(marker.color or "#ffffff"),
                      font=font, anchor="mm")
        _composite(canvas, layer)

    def preview_color(self):
        if self.active_tool == EditorTool.PAINT:
            return PAINT_PREVIEW_COLORS.get(self.active_terrain, CLEAR_PREVIEW_COLOR)
        return TOOL_PREVIEW_COLORS.get(self.active_tool, "#ffffff")

    def preview_cells(self):
        if self.hover_key is None:
            return []
        center = parse_hex_key(self.hover_key)
        if self.active_tool in BRUSH_TOOLS:
            return self.map_state.brush_targets(center, self.brush_size, self.config)
        return [center]

    def draw_tool_preview(self, canvas, t):
        if self.nav_mode != NavigationMode.VIEW:
            return
        cells = self.preview_cells()
        if not cells:
            return
        draw = ImageDraw.Draw(canvas)
        color = to_rgba(self.preview_color())
        width = max(1, round(3 * t.scale))
        for cell in cells:
            _, corners = cell_polygon(cell, self.config)
            pts = t.apply_all(corners)
            draw.line(pts + [pts[0]], fill=color, width=width, joint="curve")

    def draw_ruler(self, canvas, t):
        if self.ruler_start is None or self.ruler_current is None:
            return
        start = to_pixel(*self.ruler_start, self.config)
        end = to_pixel(*self.ruler_current, self.config)
        p0, p1 = t.apply(*start), t.apply(*end)
        color = to_rgba(RULER_COLOR)
        draw = ImageDraw.Draw(canvas)
        _dashed_line(draw, p0, p1, color, max(1, round(4 * t.scale)), 10 * t.scale, 5 * t.scale)
        dot = 6 * t.scale
        for x, y in (p0, p1):
            draw.ellipse((x - dot, y - dot, x + dot, y + dot), fill=color)

        units = get_distance(self.ruler_start, self.ruler_current, self.config)
        # Label keeps its screen size at any zoom
        mx, my = t.apply((start.x + end.x) / 2, (start.y + end.y) / 2 - 20)
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        label = ImageDraw.Draw(layer)
        label.rounded_rectangle((mx - 60, my - 18, mx + 60, my + 18), radius=8, fill=(0, 0, 0, 204))
        label.text((mx, my), ruler_label(units), fill=(255, 255, 255, 255), font=get_font(14), anchor="mm")
        _composite(canvas, layer)

    def _export_canvas(self, base):
        t = Transform(1.0, -self.image_origin[0], -self.image_origin[1])
        iw, ih = self.image.size
        self.draw_grid_layer(base, t, iw, ih, is_export=True)
        return base

    def export_grid_only(self):
        """Transparent overlay the size of the image, or None without an image."""
        if self.image is None or 0 in self.image.size:
            return None
        return self._export_canvas(Image.new("RGBA", self.image.size, (0, 0, 0, 0)))

    def export_composite(self):
        """Image with the overlay baked in, or None without an image."""
        if self.image is None or 0 in self.image.size:
            return None
        return self._export_canvas(self.image.convert("RGBA"))
