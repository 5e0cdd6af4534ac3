import json
import logging
import os
import tempfile

from project import Folder, ProjectData

log = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class ProjectStore:
    """
    Projects and folders stored as one JSON file per record, keyed by id.
    """

    def __init__(self, root_dir):
        self.root_dir = root_dir
        self.projects_dir = os.path.join(root_dir, "projects")
        self.folders_dir = os.path.join(root_dir, "folders")

    def _ensure_dirs(self):
        os.makedirs(self.projects_dir, exist_ok=True)
        os.makedirs(self.folders_dir, exist_ok=True)

    def _path(self, directory, record_id):
        if not record_id or os.sep in record_id or record_id.startswith("."):
            raise StorageError(f"Invalid record id: {record_id!r}")
        return os.path.join(directory, f"{record_id}.json")

    def _write(self, path, payload):
        self._ensure_dirs()
        try:
            fd, tmp = tempfile.mkstemp(dir=os.path.dirname(path), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def _read(self, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def _read_all(self, directory, factory):
        if not os.path.isdir(directory):
            return []
        records = []
        for name in sorted(os.listdir(directory)):
            if not name.endswith(".json"):
                continue
            try:
                payload = self._read(os.path.join(directory, name))
                if payload is not None:
                    records.append(factory(payload))
            except (StorageError, KeyError, TypeError, ValueError) as e:
                log.warning("Skipping unreadable record %s: %s", name, e)
        return records

    # --- Projects ---

    def save(self, project):
        self._write(self._path(self.projects_dir, project.id), project.to_dict())

    def load(self, project_id):
        payload = self._read(self._path(self.projects_dir, project_id))
        if payload is None:
            return None
        try:
            return ProjectData.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupt project {project_id}: {e}") from e

    def list_all(self):
        projects = self._read_all(self.projects_dir, ProjectData.from_dict)
        projects.sort(key=lambda p: p.last_modified, reverse=True)
        return projects

    def delete(self, project_id):
        try:
            os.remove(self._path(self.projects_dir, project_id))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Could not delete project {project_id}: {e}") from e

    def _update_project(self, project_id, **changes):
        project = self.load(project_id)
        if project is None:
            raise StorageError(f"No such project: {project_id}")
        for key, value in changes.items():
            setattr(project, key, value)
        self.save(project)
        return project

    def archive(self, project_id):
        return self._update_project(project_id, is_archived=True)

    def restore(self, project_id):
        return self._update_project(project_id, is_archived=False)

    def move_project(self, project_id, folder_id):
        return self._update_project(project_id, folder_id=folder_id)

    # --- Folders ---

    def save_folder(self, folder):
        self._write(self._path(self.folders_dir, folder.id), folder.to_dict())

    def list_folders(self):
        folders = self._read_all(self.folders_dir, Folder.from_dict)
        folders.sort(key=lambda f: f.created_at, reverse=True)
        return folders

    def load_folder(self, folder_id):
        payload = self._read(self._path(self.folders_dir, folder_id))
        if payload is None:
            return None
        try:
            return Folder.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupt folder {folder_id}: {e}") from e

    def _update_folder(self, folder_id, **changes):
        folder = self.load_folder(folder_id)
        if folder is None:
            raise StorageError(f"No such folder: {folder_id}")
        for key, value in changes.items():
            setattr(folder, key, value)
        self.save_folder(folder)
        return folder

    def archive_folder(self, folder_id):
        return self._update_folder(folder_id, is_archived=True)

    def restore_folder(self, folder_id):
        return self._update_folder(folder_id, is_archived=False)

    def delete_folder(self, folder_id):
        # Orphaned projects go back to the root
        for project in self.list_all():
            if project.folder_id == folder_id:
                project.folder_id = None
                self.save(project)
        try:
            os.remove(self._path(self.folders_dir, folder_id))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Could not delete folder {folder_id}: {e}") from e
