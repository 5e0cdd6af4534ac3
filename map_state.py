import logging
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum, IntEnum

from grid import AxialCoord, GridType, get_neighbors

log = logging.getLogger(__name__)


class HexState(IntEnum):
    EMPTY = 0
    BLOCKED = 1    # Red
    DIFFICULT = 2  # Yellow
    WATER = 3      # Blue
    HIDDEN = 4     # Erased


class EditorTool(str, Enum):
    MOVE = "move"
    PAINT = "paint"
    ERASE = "erase"
    LABEL = "label"
    ASSET = "asset"
    RULER = "ruler"


class NavigationMode(str, Enum):
    VIEW = "view"    # Pan/zoom camera
    GRID = "grid"    # Move/rotate grid
    IMAGE = "image"  # Move image


BRUSH_TOOLS = (EditorTool.PAINT, EditorTool.ERASE)
HISTORY_TOOLS = (EditorTool.PAINT, EditorTool.ERASE, EditorTool.LABEL, EditorTool.ASSET)


@dataclass
class GridConfig:
    grid_type: str = GridType.HEX_FLAT.value
    radius: float = 40
    offset_x: float = 0
    offset_y: float = 0
    rotation: float = 0
    line_color: str = "#ffffff"
    line_width: int = 2
    opacity: float = 0.5
    show_grid: bool = True
    show_boundary: bool = True
    show_coordinates: bool = False

    @property
    def display_rotation(self):
        return self.rotation % 360

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, payload):
        """Builds a config from a (possibly partial) dict, defaults fill the gaps."""
        payload = payload or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in payload.items() if k in known})


@dataclass
class Marker:
    text: str
    color: str = "#ffffff"

    def to_dict(self):
        return {"text": self.text, "color": self.color}

    @classmethod
    def from_dict(cls, payload):
        return cls(text=payload.get("text", ""), color=payload.get("color", "#ffffff"))


@dataclass
class Asset:
    type: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self):
        return {"type": self.type, "id": self.id}

    @classmethod
    def from_dict(cls, payload):
        return cls(type=payload["type"], id=payload.get("id") or str(uuid.uuid4()))


def get_hex_key(q, r):
    return f"{int(q)},{int(r)}"


def parse_hex_key(key):
    """
    Parses a "q,r" cell key. Raises ValueError for anything that is not two integers.
    """
    parts = key.split(",")
    if len(parts) != 2:
        raise ValueError(f"Malformed cell key: {key!r}")
    return AxialCoord(int(parts[0]), int(parts[1]))


def serialize_cells(cells, encode=lambda value: value):
    return [[key, encode(value)] for key, value in cells.items()]


def deserialize_cells(pairs, decode=lambda value: value):
    cells = {}
    for pair in pairs or []:
        try:
            key, value = pair
            coord = parse_hex_key(key)
            cells[get_hex_key(*coord)] = decode(value)
        except (TypeError, ValueError, KeyError) as e:
            log.debug("Skipping malformed cell entry %r: %s", pair, e)
    return cells


class MapState:
    def __init__(self):
        self.hex_data = {}  # key -> HexState, only non-default cells
        self.markers = {}   # key -> Marker
        self.assets = {}    # key -> Asset

    def brush_targets(self, center, brush_size, config):
        """Cells hit by a brush of the given size, center first."""
        center = AxialCoord(*center)
        if brush_size <= 1:
            return [center]
        targets = [center]
        for cell in get_neighbors(center, brush_size - 1, config):
            if cell != center:
                targets.append(cell)
        return targets

    def apply_terrain(self, cells, tool, terrain=HexState.BLOCKED):
        for q, r in cells:
            key = get_hex_key(q, r)
            if tool == EditorTool.ERASE:
                self.hex_data[key] = HexState.HIDDEN
            elif tool == EditorTool.PAINT:
                if terrain == HexState.EMPTY:
                    # Clearing never stores EMPTY, the key just goes away
                    self.hex_data.pop(key, None)
                else:
                    self.hex_data[key] = HexState(terrain)

    def toggle_marker(self, coord, text, color="#ffffff"):
        key = get_hex_key(*coord)
        if key in self.markers:
            del self.markers[key]
            return None
        marker = Marker(text=text, color=color)
        self.markers[key] = marker
        return marker

    def toggle_asset(self, coord, asset_type, asset_id=None):
        key = get_hex_key(*coord)
        if key in self.assets:
            del self.assets[key]
            return None
        asset = Asset(type=asset_type, id=asset_id or str(uuid.uuid4()))
        self.assets[key] = asset
        return asset

    def is_hidden(self, key):
        return self.hex_data.get(key) == HexState.HIDDEN

    def snapshot(self):
        return dict(self.hex_data)

    def restore(self, snapshot):
        self.hex_data = dict(snapshot)

    def clear(self):
        self.hex_data = {}
        self.markers = {}
        self.assets = {}

    def to_dict(self):
        return {
            "hexData": serialize_cells(self.hex_data, int),
            "markers": serialize_cells(self.markers, Marker.to_dict),
            "assets": serialize_cells(self.assets, Asset.to_dict),
        }

    def load_dict(self, data):
        self.hex_data = deserialize_cells(data.get("hexData"), HexState)
        self.markers = deserialize_cells(data.get("markers"), Marker.from_dict)
        self.assets = deserialize_cells(data.get("assets"), Asset.from_dict)
