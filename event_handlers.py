import logging

from camera import pan, screen_to_world, zoom_at
from grid import Point, to_cell
from map_state import BRUSH_TOOLS, HISTORY_TOOLS, EditorTool, NavigationMode, get_hex_key

log = logging.getLogger(__name__)

LEFT_BUTTON = 1
MIDDLE_BUTTON = 2
ROTATION_STEP = 1


class EventHandlersMixin:
    """
    Pointer and wheel dispatch. Events only need `x`, `y`, and `num` / `delta`
    like tkinter's, so the same handlers run headless.
    """

    def cell_at(self, sx, sy):
        world = screen_to_world(sx, sy, self.viewport)
        return to_cell(world.x, world.y, self.config)

    def _start_drag(self, kind, event):
        self.drag = {"type": kind, "x": event.x, "y": event.y}

    def on_pointer_down(self, event):
        button = getattr(event, "num", LEFT_BUTTON)
        if button == MIDDLE_BUTTON:
            self._start_drag("pan", event)
            return
        if button != LEFT_BUTTON:
            return

        if self.nav_mode == NavigationMode.GRID:
            self._start_drag("grid", event)
        elif self.nav_mode == NavigationMode.IMAGE:
            self._start_drag("image", event)
        elif self.active_tool == EditorTool.MOVE:
            self._start_drag("pan", event)
        else:
            self._start_drag("tool", event)
            cell = self.cell_at(event.x, event.y)
            self.hover_key = get_hex_key(*cell)
            if self.active_tool == EditorTool.RULER:
                self.ruler_start = cell
                self.ruler_current = cell
            else:
                self.apply_tool(cell)
        self.request_redraw()

    def on_pointer_move(self, event):
        if self.drag is None:
            key = get_hex_key(*self.cell_at(event.x, event.y))
            if key != self.hover_key:
                self.hover_key = key
                self.request_redraw()
            return

        # Rolling reference: each move applies the delta since the previous one
        dx = event.x - self.drag["x"]
        dy = event.y - self.drag["y"]
        self.drag["x"] = event.x
        self.drag["y"] = event.y
        kind = self.drag["type"]
        zoom = self.viewport.zoom

        if kind == "pan":
            self.viewport = pan(self.viewport, dx, dy)
        elif kind == "grid":
            self.config.offset_x += dx / zoom
            self.config.offset_y += dy / zoom
            self.on_state_changed()
        elif kind == "image":
            ox, oy = self.image_origin
            self.image_origin = Point(ox + dx / zoom, oy + dy / zoom)
            self.on_state_changed()
        elif kind == "tool":
            cell = self.cell_at(event.x, event.y)
            self.hover_key = get_hex_key(*cell)
            if self.active_tool == EditorTool.RULER:
                if self.ruler_start is not None:
                    self.ruler_current = cell
            elif self.active_tool in BRUSH_TOOLS:
                self.apply_tool(cell)
        self.request_redraw()

    def on_pointer_up(self, event=None):
        drag = self.drag
        self.drag = None
        if drag is not None and drag["type"] == "tool" and self.active_tool in HISTORY_TOOLS:
            self.commit_history()
        if self.active_tool == EditorTool.RULER:
            self.ruler_start = None
            self.ruler_current = None
        self.request_redraw()

    # Leaving the canvas mid-drag must not leave a drag stuck on
    on_pointer_leave = on_pointer_up

    def on_wheel(self, event):
        # tk reports wheel-down as delta < 0 or button 5 on X11
        down = getattr(event, "num", None) == 5 or getattr(event, "delta", 0) < 0
        if self.nav_mode == NavigationMode.GRID:
            self.config.rotation += ROTATION_STEP if down else -ROTATION_STEP
            self.on_state_changed()
        else:
            self.viewport = zoom_at(self.viewport, event.x, event.y, zoom_in=not down)
        self.request_redraw()
        return "break"

    def apply_tool(self, cell):
        tool = self.active_tool
        if tool in BRUSH_TOOLS:
            targets = self.map_state.brush_targets(cell, self.brush_size, self.config)
            self.map_state.apply_terrain(targets, tool, self.active_terrain)
        elif tool == EditorTool.LABEL:
            self.map_state.toggle_marker(cell, self.active_label, self.active_marker_color)
        elif tool == EditorTool.ASSET:
            self.map_state.toggle_asset(cell, self.active_asset_type)
        else:
            return
        self.on_state_changed()
