import logging
import os
from tkinter import filedialog, messagebox, simpledialog

from storage import StorageError

log = logging.getLogger(__name__)

IMAGE_FILETYPES = [("Image Files", "*.png *.jpg *.jpeg *.bmp *.gif *.webp *.tiff *.tif"), ("All Files", "*.*")]


class FileOpsMixin:
    def upload_image(self):
        f = filedialog.askopenfilename(title="Select Map Image", filetypes=IMAGE_FILETYPES)
        if f:
            self.load_image_file(f)

    def load_image_file(self, path):
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as e:
            messagebox.showerror("Upload Error", f"Could not read image: {e}")
            return False
        if self.project_id is None:
            self.new_project(name=os.path.splitext(os.path.basename(path))[0])
        self.canvas.update_idletasks()
        if not self.load_image_bytes(data, self.canvas.winfo_width(), self.canvas.winfo_height()):
            messagebox.showerror("Upload Error", f"Not a readable image:\n{path}")
            return False
        self.refresh_controls()
        self.draw_wrapper()
        return True

    def export_map(self, grid_only=False):
        img = self.export_grid_only() if grid_only else self.export_composite()
        if img is None:
            messagebox.showinfo("Export Map", "Load a map image first.")
            return
        default = "map-grid-overlay.png" if grid_only else "map-composite.png"
        f = filedialog.asksaveasfilename(
            defaultextension=".png",
            initialfile=default,
            filetypes=[("PNG Files", "*.png")],
            title="Export Grid Overlay" if grid_only else "Export Map as Image",
        )
        if not f:
            return
        try:
            img.save(f, format="PNG")
            messagebox.showinfo("Export Map", f"Map exported successfully to:\n{f}")
        except (OSError, ValueError) as e:
            messagebox.showerror("Export Error", f"Failed to export map: {e}")

    def save_map(self):
        if self.project_id is None:
            return
        if self.autosaver.flush():
            self.update_status()
        else:
            messagebox.showerror("Save Error", f"Failed to save project: {self.autosaver.last_error}")

    def new_map(self, folder_id=None):
        self.flush_pending_save()
        name = simpledialog.askstring("New Map", "Project name:", initialvalue="New Battlemap", parent=self.root)
        if name is None:
            return
        self.new_project(folder_id=folder_id, name=name)
        self.autosaver.mark_dirty()
        self.refresh_controls()
        self.draw_wrapper()

    def open_map(self, project_id):
        self.flush_pending_save()
        try:
            project = self.store.load(project_id)
        except StorageError as e:
            messagebox.showerror("Load Error", str(e))
            return
        if project is None:
            messagebox.showerror("Load Error", "That project no longer exists.")
            return
        self.open_project(project)
        if self.image is not None:
            self.canvas.update_idletasks()
            self.fit_to_image()
        self.refresh_controls()
        self.draw_wrapper()

    def flush_pending_save(self):
        if self.autosaver.armed:
            self.autosaver.flush()

    def clear_map(self):
        if messagebox.askyesno("Clear Map", "Remove all terrain, markers and assets?"):
            self.map_state.clear()
            self.commit_history()
            self.on_state_changed()
            self.draw_wrapper()
