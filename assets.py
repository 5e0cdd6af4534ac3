import io
import logging
from dataclasses import dataclass
from functools import lru_cache
from xml.sax.saxutils import escape

import cairosvg
from PIL import Image

log = logging.getLogger(__name__)

CATEGORIES = ("structure", "hazard", "loot", "entity", "nature")

ICON_SIZE = 24


@dataclass(frozen=True)
class AssetDefinition:
    id: str
    path: str  # SVG path data on a 24x24 box
    label: str
    color: str
    category: str
    view_box: str = "0 0 24 24"
    scale: float = 1.0


def _define(*definitions):
    return {d.id: d for d in definitions}


ASSET_LIBRARY = _define(
    # Structures
    AssetDefinition("door", "M3 21h18M5 21V7l8-4 8 4v14M13 11v2", "Door", "#a16207", "structure"),
    AssetDefinition("barricade", "M4 10L20 10M4 14L20 14M4 18L20 18M7 7L17 18M17 7L7 18", "Barricade", "#f59e0b", "structure"),
    AssetDefinition("wall", "M3 21h18M5 21V7h14v14M9 10a2 2 0 1 0 0-4 2 2 0 0 0 0 4", "Wall", "#78716c", "structure"),
    AssetDefinition("pillar", "M6 5h12M6 19h12M8 5v14M16 5v14M6 9h12M6 15h12", "Pillar", "#d6d3d1", "structure"),
    AssetDefinition("stairs_up", "M3 19h4v-4h4v-4h4V7h4", "Stairs Up", "#ffffff", "structure"),
    AssetDefinition("stairs_down", "M21 19h-4v-4h-4v-4H9V7H5", "Stairs Down", "#ffffff", "structure"),
    AssetDefinition("torch", "M12 2a2 2 0 0 1 2 2c0 .74-.4 1.39-1 1.73V10h-2V5.73C10.4 5.39 10 4.74 10 4a2 2 0 0 1 2-2M11 10l-2 10h6l-2-10",
                    "Torch", "#fbbf24", "structure", scale=0.8),
    # Hazards
    AssetDefinition("trap_bear", "M12 2l3 6h6l-5 4 2 6-6-4-6 4 2-6-5-4h6z", "Bear Trap", "#dc2626", "hazard"),
    AssetDefinition("mine", "M12 2v20M2 12h20M4.93 4.93l14.14 14.14M4.93 19.07l14.14-14.14M12 7a5 5 0 1 0 0 10 5 5 0 0 0 0-10",
                    "Mine", "#ef4444", "hazard", scale=0.8),
    AssetDefinition("spikes", "M4 21L7 6L10 21M14 21L17 6L20 21", "Spikes", "#991b1b", "hazard"),
    AssetDefinition("fire", "M8.5 14.5A2.5 2.5 0 0 0 11 12c0-1.38-.5-2-1-3-1.072-2.143-.224-4.054 2-6 .5 2.5 2 4.9 4 6.5 2 1.6 3 3.5 3 5.5a7 7 0 1 1-14 0c0-1.153.433-2.294 1-3a2.5 2.5 0 0 0 2.5 2.5z",
                    "Fire", "#f97316", "hazard"),
    AssetDefinition("poison", "M9 12h6m-3-3v6m-7 6a9 9 0 1 1 14 0H5z", "Poison", "#84cc16", "hazard"),
    AssetDefinition("web", "M12 2v20M2 12h20m-2.5-7.5l-15 15m0-15l15 15", "Web", "#e5e7eb", "hazard"),
    # Loot
    AssetDefinition("chest", "M3 8a2 2 0 0 1 2-2h14a2 2 0 0 1 2 2v10a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2V8m0 4h18M12 12v3", "Chest", "#06b6d4", "loot"),
    AssetDefinition("key", "M2 12h8m4 0a4 4 0 1 0 8 0 4 4 0 0 0-8 0m-8 3v-6", "Key", "#facc15", "loot"),
    AssetDefinition("scroll", "M19 4H5a2 2 0 0 0-2 2v12a2 2 0 0 0 2 2h14a2 2 0 0 0 2-2V6a2 2 0 0 0-2-2m0 0l-2 2", "Scroll", "#fde047", "loot"),
    AssetDefinition("potion", "M10 2v2h4V2M9 10h6m-7 4h8l-1 8H8l-1-8m1-8h6v6H9V6", "Potion", "#d946ef", "loot"),
    AssetDefinition("weapon", "M14.5 17.5L3 6V3h3l11.5 11.5M13 19l6-6M19 13l2 2-4 4-2-2", "Weapon", "#94a3b8", "loot"),
    AssetDefinition("food", "M10 10a4 4 0 1 1-3.6 6.4M16 8a4 4 0 1 0-2-6", "Food", "#f87171", "loot"),
    # Entities
    AssetDefinition("enemy_melee", "M4 4h16v16H4z M9 9h6v6H9z", "Melee", "#b91c1c", "entity"),
    AssetDefinition("enemy_ranged", "M12 2l10 20H2L12 2", "Ranged", "#ea580c", "entity"),
    AssetDefinition("boss", "M12 2l3 6 5 2-4 4 1 6-5-3-5 3 1-6-4-4 5-2z", "Boss", "#7e22ce", "entity"),
    AssetDefinition("npc", "M12 2a5 5 0 1 0 0 10 5 5 0 0 0 0-10M12 14c-5 0-9 3-9 8h18c0-5-4-8-9-8", "NPC", "#3b82f6", "entity"),
    AssetDefinition("corpse", "M9 9h6v6H9z M4 20h16", "Corpse", "#475569", "entity"),
    # Nature
    AssetDefinition("tree", "M12 2L4 14h16L12 2m-2 12v8h4v-8", "Tree", "#166534", "nature"),
    AssetDefinition("rock", "M4 14l4-8 4 2 6-4 2 12H4z", "Rock", "#57534e", "nature"),
    AssetDefinition("bush", "M12 10a4 4 0 0 0-4 4 4 4 0 0 0 4 4 4 4 0 0 0 4-4 4 4 0 0 0-4-4", "Bush", "#22c55e", "nature"),
    AssetDefinition("campfire", "M12 14l-4 8h8l-4-8M12 2l2 4-2 4-2-4 2-4", "Campfire", "#fb923c", "nature"),
)


def assets_by_category(category):
    return [d for d in ASSET_LIBRARY.values() if d.category == category]


def get_definition(asset_type):
    return ASSET_LIBRARY.get(asset_type)


# --- Icon rendering ---

_ICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="{view_box}" '
    'fill="none" stroke-linecap="round" stroke-linejoin="round">'
    '{body}</svg>'
)
_STROKE = '<path d="{d}" stroke="{color}" stroke-width="{width}"{extra}/>'


def icon_svg(definition, glow=False):
    """
    Standalone SVG for an asset icon.

    The normal icon is the path stroked in the definition colour with a thin
    white stroke on top; the glow variant is a single wider colour stroke that
    the renderer blurs.
    """
    d = escape(definition.path, {'"': "&quot;"})
    if glow:
        body = _STROKE.format(d=d, color=definition.color, width=4, extra="")
    else:
        body = (_STROKE.format(d=d, color=definition.color, width=2, extra="")
                + _STROKE.format(d=d, color="#ffffff", width=1, extra=' stroke-opacity="0.8"'))
    return _ICON_SVG.format(size=ICON_SIZE, view_box=definition.view_box, body=body)


def icon_pixels(definition, size):
    """Edge length in pixels of an icon drawn for a cell `size` pixels across."""
    return max(1, round(size * (definition.scale or 1.0)))


@lru_cache(maxsize=256)
def render_icon(definition, pixels, glow=False):
    """
    Rasterises an asset icon to a `pixels` x `pixels` RGBA image, or None if
    the path can't be rendered.
    """
    try:
        png = cairosvg.svg2png(bytestring=icon_svg(definition, glow).encode("utf-8"),
                               output_width=pixels, output_height=pixels)
        return Image.open(io.BytesIO(png)).convert("RGBA")
    except Exception as e:
        log.debug("Could not render icon %s: %s", definition.id, e)
        return None
