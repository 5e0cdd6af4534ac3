"""
Tests for project records and the editor session lifecycle.

Run with: pytest tests/test_project.py -v
"""

import io

import pytest
from PIL import Image

from editor import EditorSession
from map_state import EditorTool, GridConfig, HexState
from project import ProjectData
from storage import ProjectStore


def png_bytes(size=(400, 200), color=(200, 10, 10)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def store(tmp_path):
    return ProjectStore(str(tmp_path))


class TestProjectData:
    """Tests for the ProjectData codec."""

    def test_dict_keys(self):
        project = ProjectData(id="x", name="X", last_modified=5, image_blob=b"abc")
        payload = project.to_dict()
        assert payload["imageBlob"] == "YWJj"
        assert payload["imageOrigin"] == {"x": 0.0, "y": 0.0}
        assert payload["config"]["grid_type"] == "hex_flat"
        assert payload["isArchived"] is False

    def test_round_trip(self):
        project = ProjectData(id="x", name="X", last_modified=5, folder_id="f",
                              config=GridConfig(radius=12), hex_data=[["1,1", 3]])
        assert ProjectData.from_dict(project.to_dict()) == project

    def test_minimal_payload(self):
        project = ProjectData.from_dict({"id": "x"})
        assert project.name == "Untitled Project"
        assert project.image_blob is None
        assert project.config == GridConfig()


class TestSessionLifecycle:
    """Tests for creating, saving and reopening projects."""

    def test_new_project_uses_default_grid(self):
        session = EditorSession(default_grid={"grid_type": "square", "radius": 30})
        session.new_project(name="Crypt")
        assert session.project_id
        assert session.project_name == "Crypt"
        assert session.config.grid_type == "square"
        assert session.config.radius == 30

    def test_load_image_fits_view(self):
        session = EditorSession()
        session.new_project()
        assert session.load_image_bytes(png_bytes(), 800, 600)
        assert session.image.size == (400, 200)
        assert session.image.mode == "RGBA"
        assert session.viewport.zoom == pytest.approx(0.9)
        assert session.autosaver.armed

    def test_bad_image_rejected(self):
        session = EditorSession()
        session.new_project()
        assert not session.load_image_bytes(b"not an image", 800, 600)
        assert session.image is None

    def test_save_and_reopen(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Keep")
        session.load_image_bytes(png_bytes(), 800, 600)
        session.image_origin = (15, 25)
        session.rotate_grid(30)
        session.set_tool(EditorTool.PAINT)
        session.apply_tool((2, 3))
        session.map_state.toggle_marker((0, 0), "P1")
        session.map_state.toggle_asset((1, 0), "tree")
        session.save_now()

        other = EditorSession(store=store)
        other.open_project(store.load(session.project_id))
        assert other.project_name == "Keep"
        assert other.config.rotation == 30
        assert other.image_origin == (15, 25)
        assert other.image.size == (400, 200)
        assert other.map_state.hex_data == {"2,3": HexState.BLOCKED}
        assert other.map_state.markers["0,0"].text == "P1"
        assert other.map_state.assets["1,0"].type == "tree"
        assert not other.autosaver.armed

    def test_autosave_writes_through_store(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Auto")
        session.rename("Auto 2")
        assert session.autosaver.flush()
        assert store.load(session.project_id).name == "Auto 2"

    def test_archived_project_stays_archived_after_edit(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Old")
        session.save_now()
        session.set_archived(session.project_id, True)
        session.set_tool(EditorTool.PAINT)
        session.apply_tool((0, 0))
        assert session.autosaver.flush()
        assert store.load(session.project_id).is_archived

    def test_reopened_archive_keeps_its_flag(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Old")
        session.save_now()
        store.archive(session.project_id)

        other = EditorSession(store=store)
        other.open_project(store.load(session.project_id))
        other.rename("Older")
        assert other.autosaver.flush()
        saved = store.load(session.project_id)
        assert saved.name == "Older"
        assert saved.is_archived

    def test_restore_open_project(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Back")
        session.save_now()
        session.set_archived(session.project_id, True)
        session.set_archived(session.project_id, False)
        session.rename("Back again")
        session.autosaver.flush()
        assert not store.load(session.project_id).is_archived

    def test_deleting_open_project_is_not_written_back(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Gone")
        session.set_tool(EditorTool.PAINT)
        session.apply_tool((0, 0))
        session.save_now()
        old_id = session.project_id

        session.apply_tool((1, 0))
        session.delete_project(old_id)
        assert session.project_id != old_id
        assert session.map_state.hex_data == {}
        assert not session.autosaver.armed

        session.apply_tool((2, 0))
        session.autosaver.flush()
        assert store.load(old_id) is None

    def test_deleting_other_project_keeps_session(self, store):
        session = EditorSession(store=store)
        session.new_project(name="Other")
        session.save_now()
        other_id = session.project_id
        session.new_project(name="Current")
        current_id = session.project_id

        session.delete_project(other_id)
        assert session.project_id == current_id
        assert session.project_name == "Current"
        assert store.load(other_id) is None

    def test_update_config_rejects_unknown_keys(self):
        session = EditorSession()
        with pytest.raises(AttributeError):
            session.update_config(thickness=3)

    def test_grid_type_change(self):
        session = EditorSession()
        session.set_grid_type("triangle")
        assert session.config.grid_type == "triangle"
        with pytest.raises(ValueError):
            session.set_grid_type("octagon")

    def test_rotation_helpers(self):
        session = EditorSession()
        session.rotate_grid(90)
        session.rotate_grid(300)
        assert session.config.display_rotation == 30
        session.reset_rotation()
        assert session.config.rotation == 0

    def test_zoom_buttons(self):
        session = EditorSession()
        session.zoom_in()
        assert session.viewport.zoom == pytest.approx(1.1)
        session.zoom_out()
        session.zoom_out()
        assert session.viewport.zoom == pytest.approx(0.9)
        session.reset_view()
        assert session.viewport.zoom == 1.0

    def test_brush_size_clamped(self):
        session = EditorSession()
        session.set_brush_size(9)
        assert session.brush_size == 5
        session.set_brush_size(0)
        assert session.brush_size == 1
