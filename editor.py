import io
import logging

from PIL import Image, UnidentifiedImageError

from autosave import AutoSaver
from camera import ZOOM_BUTTON_STEP, Viewport, clamp_zoom, fit_image
from drawing import DrawingMixin
from event_handlers import EventHandlersMixin
from grid import GridType, Point
from history import History
from map_state import EditorTool, GridConfig, HexState, MapState, NavigationMode
from project import ProjectData, new_id, now_ms

log = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 3
MAX_BRUSH_SIZE = 5


class EditorSession(DrawingMixin, EventHandlersMixin):
    """
    Everything the editor knows about the open project, without any widgets.

    The tk application builds on top of this; tests drive it directly.
    """

    def __init__(self, store=None, default_grid=None):
        self.store = store
        self.default_grid = dict(default_grid or {})
        self.background_color = "#020617"
        self.autosaver = AutoSaver(self.save_now)

        # Project
        self.project_id = None
        self.folder_id = None
        self.project_name = "Untitled Project"
        self.is_archived = False
        self.image = None
        self.image_blob = None
        self.image_origin = Point(0.0, 0.0)
        self.config = GridConfig.from_dict(self.default_grid)
        self.map_state = MapState()
        self.history = History()

        # Camera and tools
        self.viewport = Viewport()
        self.nav_mode = NavigationMode.VIEW
        self.active_tool = EditorTool.MOVE
        self.active_terrain = HexState.BLOCKED
        self.brush_size = 1
        self.active_label = "P1"
        self.active_marker_color = "#ffffff"
        self.active_asset_type = "chest"

        # Transient interaction state
        self.hover_key = None
        self.drag = None
        self.ruler_start = None
        self.ruler_current = None

    # --- Hooks the UI overrides ---

    def request_redraw(self):
        pass

    def on_state_changed(self):
        if self.project_id is not None:
            self.autosaver.mark_dirty()

    # --- Project lifecycle ---

    def new_project(self, folder_id=None, name=None):
        self.project_id = new_id()
        self.folder_id = folder_id
        self.project_name = name or "New Battlemap"
        self.is_archived = False
        self.image = None
        self.image_blob = None
        self.image_origin = Point(0.0, 0.0)
        self.config = GridConfig.from_dict(self.default_grid)
        self.map_state.clear()
        self.history.reset()
        self.viewport = Viewport()
        self._reset_interaction()
        self.autosaver.cancel()
        log.info("Created project %s", self.project_id)

    def open_project(self, project):
        self.project_id = project.id
        self.folder_id = project.folder_id
        self.project_name = project.name
        self.is_archived = project.is_archived
        self.config = GridConfig.from_dict({**self.default_grid, **project.config.to_dict()})
        self.image_origin = Point(*project.image_origin)
        self.map_state.load_dict({
            "hexData": project.hex_data,
            "markers": project.markers,
            "assets": project.assets,
        })
        self.history.reset(self.map_state.snapshot())
        self.image = None
        self.image_blob = None
        if project.image_blob:
            self._decode_image(project.image_blob)
        self.viewport = Viewport()
        self._reset_interaction()
        self.autosaver.cancel()
        log.info("Opened project %s (%s)", project.id, project.name)

    def to_project(self):
        state = self.map_state.to_dict()
        return ProjectData(
            id=self.project_id,
            folder_id=self.folder_id,
            name=self.project_name,
            last_modified=now_ms(),
            image_blob=self.image_blob,
            image_origin=Point(*self.image_origin),
            config=GridConfig.from_dict(self.config.to_dict()),
            hex_data=state["hexData"],
            markers=state["markers"],
            assets=state["assets"],
            is_archived=self.is_archived,
        )

    def save_now(self):
        if self.project_id is None or self.store is None:
            return
        self.store.save(self.to_project())

    def set_archived(self, project_id, archived):
        """
        Archives or restores a stored project. The open project keeps its flag
        so later autosaves don't undo the change.
        """
        if project_id == self.project_id:
            if self.autosaver.armed:
                self.autosaver.flush()
            self.is_archived = archived
        if archived:
            return self.store.archive(project_id)
        return self.store.restore(project_id)

    def delete_project(self, project_id):
        """Deletes a stored project; deleting the open one starts a fresh project."""
        is_open = project_id == self.project_id
        if is_open:
            self.autosaver.cancel()
        self.store.delete(project_id)
        if is_open:
            self.new_project()

    def rename(self, name):
        name = name.strip()
        if name and name != self.project_name:
            self.project_name = name
            self.on_state_changed()

    def _reset_interaction(self):
        self.nav_mode = NavigationMode.VIEW
        self.hover_key = None
        self.drag = None
        self.ruler_start = None
        self.ruler_current = None

    # --- Image ---

    def _decode_image(self, data):
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            log.error("Could not decode image: %s", e)
            return False
        self.image = img.convert("RGBA")
        self.image_blob = bytes(data)
        return True

    def load_image_bytes(self, data, view_w, view_h):
        """
        Replaces the background image, resets its origin and fits the camera to it.
        """
        if not self._decode_image(data):
            return False
        self.image_origin = Point(0.0, 0.0)
        self.viewport = fit_image(self.image.width, self.image.height, view_w, view_h)
        self.on_state_changed()
        return True

    # --- History ---

    def commit_history(self):
        self.history.push(self.map_state.snapshot())

    def undo(self):
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.map_state.restore(snapshot)
        self.on_state_changed()
        return True

    def redo(self):
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.map_state.restore(snapshot)
        self.on_state_changed()
        return True

    # --- Modes and tools ---

    def set_nav_mode(self, mode):
        self.nav_mode = NavigationMode(mode)
        if self.nav_mode != NavigationMode.VIEW:
            self.hover_key = None

    def set_tool(self, tool):
        self.nav_mode = NavigationMode.VIEW
        self.active_tool = EditorTool(tool)
        self.ruler_start = None
        self.ruler_current = None

    def set_brush_size(self, size):
        self.brush_size = min(max(int(size), 1), MAX_BRUSH_SIZE)

    def set_label(self, text):
        self.active_label = text[:MAX_LABEL_LENGTH]

    # --- Grid and camera ---

    def update_config(self, **changes):
        for key, value in changes.items():
            if not hasattr(self.config, key):
                raise AttributeError(f"Unknown grid setting: {key}")
            setattr(self.config, key, value)
        self.on_state_changed()

    def set_grid_type(self, grid_type):
        self.update_config(grid_type=GridType(grid_type).value)

    def rotate_grid(self, step):
        self.update_config(rotation=self.config.rotation + step)

    def reset_rotation(self):
        self.update_config(rotation=0)

    def zoom_in(self):
        self.viewport = Viewport(self.viewport.x, self.viewport.y, clamp_zoom(self.viewport.zoom + ZOOM_BUTTON_STEP))

    def zoom_out(self):
        self.viewport = Viewport(self.viewport.x, self.viewport.y, clamp_zoom(self.viewport.zoom - ZOOM_BUTTON_STEP))

    def reset_view(self):
        self.viewport = Viewport()
