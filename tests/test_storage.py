"""
Tests for storage module.

Run with: pytest tests/test_storage.py -v
"""

import os

import pytest

from grid import Point
from map_state import GridConfig
from project import Folder, ProjectData
from storage import ProjectStore, StorageError


def make_project(project_id="p1", last_modified=1000, **kwargs):
    return ProjectData(id=project_id, name=f"Map {project_id}", last_modified=last_modified, **kwargs)


@pytest.fixture
def store(tmp_path):
    return ProjectStore(str(tmp_path))


class TestProjects:
    """Tests for project records."""

    def test_save_and_load(self, store):
        project = make_project(
            image_blob=b"\x89PNG\r\n\x1a\nbinary",
            image_origin=Point(12.5, -3),
            config=GridConfig(grid_type="triangle", radius=31),
            hex_data=[["2,3", 1]],
            markers=[["0,0", {"text": "P1", "color": "#ffffff"}]],
            assets=[["1,1", {"type": "chest", "id": "a1"}]],
        )
        store.save(project)
        loaded = store.load("p1")
        assert loaded == project
        assert loaded.image_blob == b"\x89PNG\r\n\x1a\nbinary"

    def test_save_overwrites_by_id(self, store):
        store.save(make_project())
        updated = make_project()
        updated.name = "Renamed"
        store.save(updated)
        assert [p.name for p in store.list_all()] == ["Renamed"]

    def test_load_missing(self, store):
        assert store.load("nope") is None

    def test_list_newest_first(self, store):
        store.save(make_project("old", 1))
        store.save(make_project("new", 3))
        store.save(make_project("mid", 2))
        assert [p.id for p in store.list_all()] == ["new", "mid", "old"]

    def test_list_empty_store(self, store):
        assert store.list_all() == []
        assert store.list_folders() == []

    def test_delete(self, store):
        store.save(make_project())
        store.delete("p1")
        assert store.load("p1") is None
        # Deleting twice is fine
        store.delete("p1")

    def test_archive_and_restore(self, store):
        store.save(make_project())
        assert store.archive("p1").is_archived
        assert store.load("p1").is_archived
        store.restore("p1")
        assert not store.load("p1").is_archived

    def test_archive_missing_raises(self, store):
        with pytest.raises(StorageError):
            store.archive("ghost")

    def test_move_project(self, store):
        store.save(make_project())
        store.move_project("p1", "f1")
        assert store.load("p1").folder_id == "f1"

    @pytest.mark.parametrize("bad_id", ["", "../escape", ".hidden"])
    def test_bad_ids_rejected(self, store, bad_id):
        with pytest.raises(StorageError):
            store.load(bad_id)

    def test_corrupt_record(self, store):
        store.save(make_project("good"))
        with open(os.path.join(store.projects_dir, "bad.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        assert [p.id for p in store.list_all()] == ["good"]
        with pytest.raises(StorageError):
            store.load("bad")

    def test_no_temp_files_left(self, store):
        store.save(make_project())
        assert os.listdir(store.projects_dir) == ["p1.json"]


class TestFolders:
    """Tests for folder records."""

    def test_save_and_list(self, store):
        store.save_folder(Folder(id="f1", name="Campaign", created_at=1))
        store.save_folder(Folder(id="f2", name="One-shots", created_at=2))
        assert [f.id for f in store.list_folders()] == ["f2", "f1"]

    def test_delete_folder_moves_projects_to_root(self, store):
        store.save_folder(Folder(id="f1", name="Campaign"))
        store.save(make_project("p1", folder_id="f1"))
        store.save(make_project("p2", folder_id="other"))
        store.delete_folder("f1")
        assert store.list_folders() == []
        assert store.load("p1").folder_id is None
        assert store.load("p2").folder_id == "other"

    def test_archive_and_restore_folder(self, store):
        store.save_folder(Folder(id="f1", name="Campaign"))
        store.save(make_project("p1", folder_id="f1"))
        assert store.archive_folder("f1").is_archived
        assert store.load_folder("f1").is_archived
        assert [f.is_archived for f in store.list_folders()] == [True]
        # Projects inside stay where they are
        assert store.load("p1").folder_id == "f1"
        store.restore_folder("f1")
        assert not store.load_folder("f1").is_archived

    def test_archive_missing_folder_raises(self, store):
        assert store.load_folder("ghost") is None
        with pytest.raises(StorageError):
            store.archive_folder("ghost")
