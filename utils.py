import json
import logging
import os
import sys

from PIL import ImageColor

log = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "ui_bg_color": "#0f172a",
    "ui_fg_color": "#818cf8",
    "background_color": "#020617",
    "projects_directory": None,
    "autosave_delay": 2.0,
    "default_grid": {},
}


def app_dir():
    # Next to the exe when frozen, next to the script otherwise
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.abspath(__file__))


def default_settings_file():
    return os.environ.get("GRID_CALIBRATOR_SETTINGS") or os.path.join(app_dir(), "settings.json")


def to_rgba(color, alpha=255):
    try:
        rgb = ImageColor.getrgb(color)
    except (ValueError, AttributeError, TypeError):
        log.debug("Bad color %r, using white", color)
        rgb = (255, 255, 255)
    if len(rgb) == 4:
        return rgb
    return rgb + (alpha,)


def darken_color(hex_color, factor=0.5):
    r, g, b, _ = to_rgba(hex_color)
    return f"#{int(r * factor):02x}{int(g * factor):02x}{int(b * factor):02x}"


def load_settings(path):
    settings = dict(DEFAULT_SETTINGS)
    if not os.path.exists(path):
        return settings
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Error loading settings from %s: %s", path, e)
        return settings
    if isinstance(data, dict):
        settings.update({k: v for k, v in data.items() if k in DEFAULT_SETTINGS})
    return settings


def save_settings(path, settings):
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
    except OSError as e:
        log.warning("Error saving settings to %s: %s", path, e)
        return False
    return True


class UtilsMixin:
    def load_global_settings(self):
        self.settings = load_settings(self.settings_file)
        self.background_color = self.settings["background_color"]
        if self.settings.get("autosave_delay") is not None:
            self.autosaver.delay = float(self.settings["autosave_delay"])
        return self.settings

    def save_global_settings(self):
        self.settings["background_color"] = self.background_color
        self.settings["autosave_delay"] = self.autosaver.delay
        return save_settings(self.settings_file, self.settings)
