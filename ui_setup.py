import tkinter as tk
from tkinter import ttk

from assets import CATEGORIES
from grid import GridType
from map_state import EditorTool, HexState, NavigationMode
from utils import darken_color

MARKER_COLORS = ["#ffffff", "#ef4444", "#f59e0b", "#22c55e", "#3b82f6", "#a855f7", "#000000"]
TERRAIN_CHOICES = {
    "Blocked": HexState.BLOCKED,
    "Difficult": HexState.DIFFICULT,
    "Water": HexState.WATER,
    "Clear": HexState.EMPTY,
}
TOOL_BUTTONS = [
    ("✋", EditorTool.MOVE),
    ("🖌", EditorTool.PAINT),
    ("⌫", EditorTool.ERASE),
    ("🏷", EditorTool.LABEL),
    ("📦", EditorTool.ASSET),
    ("📏", EditorTool.RULER),
]
MODE_BUTTONS = [
    ("VIEW", NavigationMode.VIEW),
    ("GRID", NavigationMode.GRID),
    ("IMAGE", NavigationMode.IMAGE),
]


class UiSetupMixin:
    def apply_theme(self):
        style = ttk.Style()
        style.theme_use('clam')

        bg = self.settings["ui_bg_color"]
        fg = self.settings["ui_fg_color"]
        btn_bg = darken_color(bg, 0.9) if bg != "#000000" else "#0a0a0a"
        font = ("Consolas", 10, "bold")

        self.root.configure(bg=bg)

        style.configure(".", background=bg, foreground=fg, font=font)
        for name in ("TFrame", "TLabel", "TCheckbutton", "TRadiobutton", "TLabelframe", "TLabelframe.Label"):
            style.configure(name, background=bg, foreground=fg, bordercolor=fg)
        style.map("TCheckbutton", background=[("active", bg)])
        style.map("TRadiobutton", background=[("active", bg)])

        style.configure("TButton", background=btn_bg, bordercolor=fg, lightcolor=fg, darkcolor=fg)
        style.map("TButton", background=[("active", darken_color(fg, 0.1))], foreground=[("active", fg)])

        # Text fields
        for name in ("TEntry", "TCombobox", "TSpinbox"):
            style.configure(name, fieldbackground=bg, foreground=fg, insertcolor=fg, arrowcolor=fg, background=btn_bg)
        style.map("TCombobox", fieldbackground=[("readonly", bg)], foreground=[("readonly", fg)])

        # Project tree
        style.configure("Treeview", background=bg, fieldbackground=bg, borderwidth=0)
        style.map("Treeview", background=[("selected", darken_color(fg, 0.2))], foreground=[("selected", fg)])

        style.configure("TSeparator", background=fg)
        style.configure("TScale", troughcolor=btn_bg)

        if hasattr(self, 'canvas'):
            self.canvas.config(bg=self.background_color, highlightbackground=fg, highlightcolor=fg)

    def setup_ui(self):
        self.canvas = tk.Canvas(self.root, bg=self.background_color, highlightthickness=1,
                                highlightbackground=self.settings["ui_fg_color"], cursor="fleur")
        self.canvas.pack(fill="both", expand=True)

        # Bindings
        self.canvas.bind("<ButtonPress-1>", self.on_pointer_down)
        self.canvas.bind("<ButtonPress-2>", self.on_pointer_down)
        self.canvas.bind("<Motion>", self.on_pointer_move)
        self.canvas.bind("<ButtonRelease-1>", self.on_pointer_up)
        self.canvas.bind("<ButtonRelease-2>", self.on_pointer_up)
        self.canvas.bind("<Leave>", self.on_pointer_leave)
        # Mouse wheel bindings (Windows/Linux/Mac support)
        self.canvas.bind("<MouseWheel>", self.on_wheel)
        self.canvas.bind("<Button-4>", self.on_wheel)
        self.canvas.bind("<Button-5>", self.on_wheel)
        self.canvas.bind("<Configure>", lambda e: self.draw_wrapper())

        self.root.bind("<Control-z>", lambda e: self.do_undo())
        self.root.bind("<Control-y>", lambda e: self.do_redo())
        self.root.bind("<Control-s>", lambda e: self.save_map())

        bg = self.settings["ui_bg_color"]
        fg = self.settings["ui_fg_color"]

        # Top Left Buttons
        self.top_left = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.top_left.place(x=10, y=10)
        ttk.Button(self.top_left, text="> NEW", command=self.new_map).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> PROJECTS", command=self.open_projects_overlay).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> UPLOAD", command=self.upload_image).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> SAVE", command=self.save_map).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> EXPORT", command=lambda: self.export_map(grid_only=False)).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> GRID PNG", command=lambda: self.export_map(grid_only=True)).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_left, text="> CLEAR", command=self.clear_map).pack(side="left", padx=2, pady=2)

        # Top Right Buttons
        self.top_right = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.top_right.place(relx=1.0, x=-10, y=10, anchor="ne")
        self.btn_undo = ttk.Button(self.top_right, text="↶", width=3, command=self.do_undo)
        self.btn_undo.pack(side="left", padx=2, pady=2)
        self.btn_redo = ttk.Button(self.top_right, text="↷", width=3, command=self.do_redo)
        self.btn_redo.pack(side="left", padx=2, pady=2)
        ttk.Separator(self.top_right, orient="vertical").pack(side="left", fill="y", padx=4)
        ttk.Button(self.top_right, text="+", width=3, command=lambda: self.camera_action(self.zoom_in)).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_right, text="1:1", width=4, command=lambda: self.camera_action(self.reset_view)).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_right, text="-", width=3, command=lambda: self.camera_action(self.zoom_out)).pack(side="left", padx=2, pady=2)
        ttk.Button(self.top_right, text="⚙", width=3, command=self.open_settings_overlay).pack(side="left", padx=2, pady=2)

        # Left Vertical Tools Bar
        self.tools_bar = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.tools_bar.place(x=10, y=50, width=60)

        ttk.Label(self.tools_bar, text="MODE").pack(pady=5)
        self.mode_var = tk.StringVar(value=self.nav_mode.value)
        for label, mode in MODE_BUTTONS:
            tk.Radiobutton(self.tools_bar, text=label, value=mode.value, variable=self.mode_var, indicatoron=False,
                           bg=bg, fg=fg, selectcolor=darken_color(fg, 0.3), bd=1, relief="solid",
                           command=self.on_mode_change).pack(fill="x", padx=2, pady=2)

        ttk.Separator(self.tools_bar, orient="horizontal").pack(fill="x", padx=2, pady=4)
        ttk.Label(self.tools_bar, text="TOOLS").pack(pady=5)
        self.tool_var = tk.StringVar(value=self.active_tool.value)
        for icon, tool in TOOL_BUTTONS:
            tk.Radiobutton(self.tools_bar, text=icon, value=tool.value, variable=self.tool_var, indicatoron=False,
                           bg=bg, fg=fg, selectcolor=darken_color(fg, 0.3), bd=1, relief="solid",
                           font=("Consolas", 14), command=self.on_tool_change).pack(fill="x", padx=2, pady=3)

        ttk.Separator(self.tools_bar, orient="horizontal").pack(fill="x", padx=2, pady=4)
        self.btn_tools_grid = tk.Button(self.tools_bar, text="▦", bg=bg, fg=fg, bd=1, relief="solid", command=self.toggle_grid, font=("Consolas", 16), height=1)
        self.btn_tools_grid.pack(fill="x", padx=2, pady=5)

        # Tool option overlays (one visible at a time)
        self.overlay_paint = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.overlay_label = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.overlay_assets = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.overlay_grid = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.grid_visible = False

        # 1. Paint Content
        content_paint = ttk.LabelFrame(self.overlay_paint, text="Terrain")
        content_paint.pack(fill="both", expand=True, padx=5, pady=5)
        self.terrain_var = tk.StringVar(value="Blocked")
        for name in TERRAIN_CHOICES:
            ttk.Radiobutton(content_paint, text=name, value=name, variable=self.terrain_var,
                            command=self.on_terrain_change).pack(anchor="w", padx=5, pady=1)
        ttk.Label(content_paint, text="Brush Size:").pack(anchor="w", padx=5, pady=(8, 0))
        self.brush_var = tk.IntVar(value=self.brush_size)
        ttk.Spinbox(content_paint, from_=1, to=5, width=5, textvariable=self.brush_var,
                    command=self.on_brush_change).pack(anchor="w", padx=5, pady=2)

        # 2. Label Content
        content_label = ttk.LabelFrame(self.overlay_label, text="Marker")
        content_label.pack(fill="both", expand=True, padx=5, pady=5)
        ttk.Label(content_label, text="Text (max 3):").pack(anchor="w", padx=5, pady=2)
        self.label_var = tk.StringVar(value=self.active_label)
        self.label_var.trace_add("write", self.on_label_change)
        ttk.Entry(content_label, textvariable=self.label_var, width=6).pack(anchor="w", padx=5, pady=2)
        swatches = ttk.Frame(content_label)
        swatches.pack(fill="x", padx=5, pady=5)
        for color in MARKER_COLORS:
            tk.Button(swatches, bg=color, activebackground=color, width=2, bd=1, relief="solid",
                      command=lambda c=color: self.on_marker_color(c)).pack(side="left", padx=1)

        # 3. Assets Content
        content_assets = ttk.LabelFrame(self.overlay_assets, text="Assets")
        content_assets.pack(fill="both", expand=True, padx=5, pady=5)
        self.category_var = tk.StringVar(value=CATEGORIES[0])
        cb = ttk.Combobox(content_assets, textvariable=self.category_var, values=list(CATEGORIES), state="readonly")
        cb.pack(fill="x", padx=5, pady=5)
        cb.bind("<<ComboboxSelected>>", lambda e: self.populate_asset_list())
        self.asset_list = tk.Listbox(content_assets, height=8, bg=bg, fg=fg, selectbackground=darken_color(fg, 0.3),
                                     highlightthickness=0, exportselection=False)
        self.asset_list.pack(fill="both", expand=True, padx=5, pady=5)
        self.asset_list.bind("<<ListboxSelect>>", self.on_asset_select)
        self.populate_asset_list()

        # 4. Grid Content
        self.grid_controls = ttk.LabelFrame(self.overlay_grid, text="Grid Settings")
        self.grid_controls.pack(fill="x", padx=5, pady=10)

        ttk.Label(self.grid_controls, text="Shape:").grid(row=0, column=0, sticky="w", padx=5, pady=2)
        self.grid_type_var = tk.StringVar(value=self.config.grid_type)
        type_cb = ttk.Combobox(self.grid_controls, textvariable=self.grid_type_var,
                               values=[t.value for t in GridType], state="readonly", width=10)
        type_cb.grid(row=0, column=1, padx=5, pady=2)
        type_cb.bind("<<ComboboxSelected>>", self.update_grid_config)

        self.radius_var = tk.DoubleVar(value=self.config.radius)
        self.line_width_var = tk.DoubleVar(value=self.config.line_width)
        self.opacity_var = tk.DoubleVar(value=self.config.opacity)
        sliders = [
            ("Size:", self.radius_var, 10, 200),
            ("Line:", self.line_width_var, 1, 10),
            ("Opacity:", self.opacity_var, 0.0, 1.0),
        ]
        for row, (label, var, lo, hi) in enumerate(sliders, start=1):
            ttk.Label(self.grid_controls, text=label).grid(row=row, column=0, sticky="w", padx=5, pady=2)
            ttk.Scale(self.grid_controls, from_=lo, to=hi, variable=var,
                      command=lambda v: self.update_grid_config()).grid(row=row, column=1, sticky="ew", padx=5, pady=2)

        self.show_grid_var = tk.BooleanVar(value=self.config.show_grid)
        self.show_coords_var = tk.BooleanVar(value=self.config.show_coordinates)
        ttk.Checkbutton(self.grid_controls, text="Show Grid", variable=self.show_grid_var,
                        command=self.update_grid_config).grid(row=4, column=0, sticky="w", padx=5, pady=2)
        ttk.Checkbutton(self.grid_controls, text="Coords", variable=self.show_coords_var,
                        command=self.update_grid_config).grid(row=4, column=1, sticky="w", padx=5, pady=2)

        self.lbl_rotation = ttk.Label(self.grid_controls, text="Rotation: 0°")
        self.lbl_rotation.grid(row=5, column=0, columnspan=2, sticky="w", padx=5, pady=2)
        ttk.Button(self.grid_controls, text="Reset 0°", command=lambda: self.grid_action(self.reset_rotation)).grid(row=6, column=0, padx=5, pady=5)
        ttk.Button(self.grid_controls, text="+90°", command=lambda: self.grid_action(self.rotate_grid, 90)).grid(row=6, column=1, padx=5, pady=5)
        ttk.Button(self.grid_controls, text="Color", command=self.choose_grid_color).grid(row=7, column=0, padx=5, pady=5)

        # Status Bar at bottom left
        self.status_bar = tk.Frame(self.root, bg=bg, highlightbackground=fg, highlightthickness=1)
        self.status_bar.place(x=10, rely=1.0, y=-10, anchor="sw")
        self.lbl_status = ttk.Label(self.status_bar, text="STATUS: READY")
        self.lbl_status.pack(padx=10, pady=2)

        # Initial Draw
        self.root.after(10, self.draw_wrapper)

    def populate_asset_list(self):
        self.asset_list.delete(0, "end")
        self.visible_asset_ids = []
        for definition in self.asset_definitions(self.category_var.get()):
            self.asset_list.insert("end", definition.label)
            self.visible_asset_ids.append(definition.id)
            if definition.id == self.active_asset_type:
                self.asset_list.selection_set("end")
