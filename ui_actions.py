import tkinter as tk
from tkinter import ttk, colorchooser, messagebox, simpledialog

from PIL import ImageTk

from assets import assets_by_category
from autosave import SaveStatus
from camera import fit_image
from map_state import EditorTool
from project import Folder, new_id
from storage import StorageError
from ui_setup import TERRAIN_CHOICES

TICK_MS = 250


class UiActionsMixin:
    # --- Rendering ---

    def draw_wrapper(self):
        self.canvas.delete("all")
        w = self.canvas.winfo_width()
        h = self.canvas.winfo_height()
        if w <= 1 or h <= 1:
            return
        frame = self.render_frame(w, h)
        # Keep ref or tk drops the image
        self._frame_ref = ImageTk.PhotoImage(frame)
        self.canvas.create_image(0, 0, image=self._frame_ref, anchor="nw")
        self.update_status()

    def request_redraw(self):
        self.draw_wrapper()

    def tick(self):
        if self.autosaver.poll():
            self.update_status()
        self.root.after(TICK_MS, self.tick)

    def update_status(self):
        status = self.autosaver.status
        text = f"{self.project_name.upper()} | {status.value.upper()} | ZOOM {self.viewport.zoom * 100:.0f}%"
        if self.nav_mode.value != "view":
            text += f" | {self.nav_mode.value.upper()} MODE"
        if status == SaveStatus.ERROR and self.autosaver.last_error is not None:
            text += f" ({self.autosaver.last_error})"
        self.lbl_status.config(text=text)
        self.lbl_rotation.config(text=f"Rotation: {self.config.display_rotation}°")
        self.btn_undo.config(state="normal" if self.history.can_undo else "disabled")
        self.btn_redo.config(state="normal" if self.history.can_redo else "disabled")
        self.root.title(f"Grid Calibrator - {self.project_name}")

    def refresh_controls(self):
        self.mode_var.set(self.nav_mode.value)
        self.tool_var.set(self.active_tool.value)
        self.grid_type_var.set(self.config.grid_type)
        self.radius_var.set(self.config.radius)
        self.line_width_var.set(self.config.line_width)
        self.opacity_var.set(self.config.opacity)
        self.show_grid_var.set(self.config.show_grid)
        self.show_coords_var.set(self.config.show_coordinates)
        self.update_status()

    def fit_to_image(self):
        if self.image is None:
            return
        self.viewport = fit_image(self.image.width, self.image.height,
                                  self.canvas.winfo_width(), self.canvas.winfo_height())

    # --- Overlays ---

    def _hide_all_left(self):
        self.overlay_paint.place_forget()
        self.overlay_label.place_forget()
        self.overlay_assets.place_forget()
        self.overlay_grid.place_forget()
        self.grid_visible = False

    def _show_tool_overlay(self):
        self._hide_all_left()
        overlay = {
            EditorTool.PAINT: self.overlay_paint,
            EditorTool.ERASE: self.overlay_paint,
            EditorTool.LABEL: self.overlay_label,
            EditorTool.ASSET: self.overlay_assets,
        }.get(self.active_tool)
        if overlay is self.overlay_assets:
            overlay.place(x=80, y=50, width=260, height=300)
        elif overlay is not None:
            overlay.place(x=80, y=50, width=260)

    def toggle_grid(self):
        v = self.grid_visible
        self._hide_all_left()
        if not v:
            self.overlay_grid.place(x=80, y=50, width=300)
            self.grid_visible = True

    # --- Modes and tools ---

    def on_mode_change(self, *args):
        self.set_nav_mode(self.mode_var.get())
        self.draw_wrapper()

    def on_tool_change(self, *args):
        self.set_tool(self.tool_var.get())
        self.mode_var.set(self.nav_mode.value)
        self._show_tool_overlay()
        self.draw_wrapper()

    def on_terrain_change(self):
        self.active_terrain = TERRAIN_CHOICES[self.terrain_var.get()]

    def on_brush_change(self):
        try:
            self.set_brush_size(self.brush_var.get())
        except (tk.TclError, ValueError):
            return
        self.brush_var.set(self.brush_size)

    def on_label_change(self, *args):
        text = self.label_var.get()
        self.set_label(text)
        if text != self.active_label:
            self.label_var.set(self.active_label)

    def on_marker_color(self, color):
        self.active_marker_color = color

    def asset_definitions(self, category):
        return assets_by_category(category)

    def on_asset_select(self, event=None):
        selected = self.asset_list.curselection()
        if selected:
            self.active_asset_type = self.visible_asset_ids[selected[0]]

    # --- Camera, grid, history ---

    def camera_action(self, action):
        action()
        self.draw_wrapper()

    def grid_action(self, action, *args):
        action(*args)
        self.draw_wrapper()

    def do_undo(self):
        if self.undo():
            self.draw_wrapper()

    def do_redo(self):
        if self.redo():
            self.draw_wrapper()

    def update_grid_config(self, event=None):
        try:
            self.update_config(
                grid_type=self.grid_type_var.get(),
                radius=round(self.radius_var.get()),
                line_width=round(self.line_width_var.get()),
                opacity=round(self.opacity_var.get(), 2),
                show_grid=self.show_grid_var.get(),
                show_coordinates=self.show_coords_var.get(),
            )
        except (tk.TclError, ValueError):
            return
        self.draw_wrapper()

    def choose_grid_color(self):
        color_code = colorchooser.askcolor(title="Choose grid color", initialcolor=self.config.line_color)
        if color_code[1]:
            self.update_config(line_color=color_code[1])
            self.draw_wrapper()

    # --- Settings ---

    def open_settings_overlay(self):
        top = tk.Toplevel(self.root)
        top.title("Settings")
        top.configure(bg=self.settings["ui_bg_color"])
        top.transient(self.root)
        top.grab_set()

        ttk.Label(top, text="Grid Calibrator Settings", anchor="center").pack(fill="x", pady=10)
        ttk.Button(top, text="Rename Project", command=lambda: self.rename_project(top)).pack(fill="x", padx=20, pady=5)
        ttk.Button(top, text="UI Colors", command=lambda: self.open_ui_settings(top)).pack(fill="x", padx=20, pady=5)
        ttk.Button(top, text="Canvas Color", command=lambda: self.choose_background_color(top)).pack(fill="x", padx=20, pady=5)

    def rename_project(self, top=None):
        if top:
            top.destroy()
        name = simpledialog.askstring("Rename", "Project name:", initialvalue=self.project_name, parent=self.root)
        if name:
            self.rename(name)
            self.update_status()

    def open_ui_settings(self, top=None):
        if top:
            top.destroy()
        bg = colorchooser.askcolor(title="Background Color", initialcolor=self.settings["ui_bg_color"])
        if bg[1]:
            self.settings["ui_bg_color"] = bg[1]
        fg = colorchooser.askcolor(title="Foreground/Accent Color", initialcolor=self.settings["ui_fg_color"])
        if fg[1]:
            self.settings["ui_fg_color"] = fg[1]

        self.apply_theme()
        self.save_global_settings()

    def choose_background_color(self, top=None):
        if top:
            top.destroy()
        color = colorchooser.askcolor(title="Canvas Color", initialcolor=self.background_color)
        if color[1]:
            self.background_color = color[1]
            self.canvas.config(bg=self.background_color)
            self.save_global_settings()
            self.draw_wrapper()

    # --- Project list ---

    def open_projects_overlay(self):
        top = tk.Toplevel(self.root)
        top.title("Projects")
        top.geometry("520x420")
        top.configure(bg=self.settings["ui_bg_color"])
        top.transient(self.root)

        self.show_archived_var = tk.BooleanVar(value=False)
        tree = ttk.Treeview(top, show="tree")
        tree.pack(fill="both", expand=True, padx=10, pady=10)
        tree.bind("<Double-1>", lambda e: self._open_selected(tree, top))

        bar = ttk.Frame(top)
        bar.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(bar, text="Open", command=lambda: self._open_selected(tree, top)).pack(side="left", padx=2)
        ttk.Button(bar, text="New", command=lambda: self._new_in_selected(tree, top)).pack(side="left", padx=2)
        ttk.Button(bar, text="Folder", command=lambda: self._new_folder(tree)).pack(side="left", padx=2)
        ttk.Button(bar, text="Archive", command=lambda: self._set_archived(tree, True)).pack(side="left", padx=2)
        ttk.Button(bar, text="Restore", command=lambda: self._set_archived(tree, False)).pack(side="left", padx=2)
        ttk.Button(bar, text="Delete", command=lambda: self._delete_selected(tree)).pack(side="left", padx=2)
        ttk.Checkbutton(bar, text="Archived", variable=self.show_archived_var,
                        command=lambda: self.populate_project_tree(tree)).pack(side="right", padx=2)

        self.populate_project_tree(tree)

    def populate_project_tree(self, tree):
        tree.delete(*tree.get_children())
        archived = self.show_archived_var.get()
        try:
            folders = [f for f in self.store.list_folders() if f.is_archived == archived]
            projects = [p for p in self.store.list_all() if p.is_archived == archived]
        except StorageError as e:
            messagebox.showerror("Projects", str(e))
            return
        for folder in folders:
            tree.insert("", "end", iid=f"folder:{folder.id}", text=f"📁 {folder.name}", open=True)
        folder_ids = {f.id for f in folders}
        for project in projects:
            parent = f"folder:{project.folder_id}" if project.folder_id in folder_ids else ""
            tree.insert(parent, "end", iid=f"project:{project.id}", text=project.name)

    def _selection(self, tree):
        selected = tree.selection()
        if not selected:
            return None, None
        kind, _, record_id = selected[0].partition(":")
        return kind, record_id

    def _open_selected(self, tree, top):
        kind, record_id = self._selection(tree)
        if kind == "project":
            top.destroy()
            self.open_map(record_id)

    def _new_in_selected(self, tree, top):
        kind, record_id = self._selection(tree)
        top.destroy()
        self.new_map(folder_id=record_id if kind == "folder" else None)

    def _new_folder(self, tree):
        name = simpledialog.askstring("New Folder", "Folder name:", parent=tree)
        if not name:
            return
        try:
            self.store.save_folder(Folder(id=new_id(), name=name))
        except StorageError as e:
            messagebox.showerror("Projects", str(e))
        self.populate_project_tree(tree)

    def _set_archived(self, tree, archived):
        kind, record_id = self._selection(tree)
        if kind is None:
            return
        try:
            if kind == "folder":
                if archived:
                    self.store.archive_folder(record_id)
                else:
                    self.store.restore_folder(record_id)
            else:
                self.set_archived(record_id, archived)
        except StorageError as e:
            messagebox.showerror("Projects", str(e))
        self.populate_project_tree(tree)

    def _delete_selected(self, tree):
        kind, record_id = self._selection(tree)
        if kind is None:
            return
        if not messagebox.askyesno("Delete", "Delete permanently?", parent=tree):
            return
        was_open = record_id == self.project_id
        try:
            if kind == "folder":
                self.store.delete_folder(record_id)
            else:
                self.delete_project(record_id)
        except StorageError as e:
            messagebox.showerror("Projects", str(e))
        if was_open and record_id != self.project_id:
            self.refresh_controls()
            self.draw_wrapper()
        self.populate_project_tree(tree)
