import argparse
import logging
import os
import tkinter as tk

from editor import EditorSession
from file_ops import FileOpsMixin
from storage import ProjectStore, StorageError
from ui_actions import UiActionsMixin
from ui_setup import UiSetupMixin
from utils import UtilsMixin, app_dir, default_settings_file

log = logging.getLogger(__name__)


class MapBuilderApp(UiSetupMixin, UiActionsMixin, FileOpsMixin, UtilsMixin, EditorSession):
    def __init__(self, root, projects_dir=None, settings_file=None):
        EditorSession.__init__(self)
        self.root = root
        self.root.title("Grid Calibrator")
        self.root.geometry("1200x800")

        self.settings_file = settings_file or default_settings_file()
        self.load_global_settings()
        self.default_grid = dict(self.settings.get("default_grid") or {})

        projects_dir = projects_dir or self.settings.get("projects_directory") or os.path.join(app_dir(), "projects")
        self.store = ProjectStore(projects_dir)
        log.info("Projects stored in %s", projects_dir)

        self.apply_theme()
        self.setup_ui()
        self.open_latest_project()

        self.root.protocol("WM_DELETE_WINDOW", self.on_close)
        self.root.after(250, self.tick)

    def open_latest_project(self):
        try:
            projects = [p for p in self.store.list_all() if not p.is_archived]
        except StorageError as e:
            log.error("Could not list projects: %s", e)
            projects = []
        if projects:
            self.open_project(projects[0])
            self.root.after(20, self._fit_and_draw)
        else:
            self.new_project()
        self.refresh_controls()

    def _fit_and_draw(self):
        self.fit_to_image()
        self.draw_wrapper()

    def on_close(self):
        self.flush_pending_save()
        self.root.destroy()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Calibrate a tactical grid over a battle map image.")
    parser.add_argument("image", nargs="?", help="map image to open in a new project")
    parser.add_argument("--projects-dir", help="where projects are stored")
    parser.add_argument("--settings", help="settings file (default: settings.json next to the app)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    t_root = tk.Tk()
    t_app = MapBuilderApp(t_root, projects_dir=args.projects_dir, settings_file=args.settings)
    if args.image:
        t_app.new_project(name=os.path.splitext(os.path.basename(args.image))[0])
        t_root.after(50, lambda: t_app.load_image_file(args.image))
    t_root.mainloop()


if __name__ == "__main__":
    main()
