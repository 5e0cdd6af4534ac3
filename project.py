import base64
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from grid import Point
from map_state import GridConfig


def now_ms():
    return int(time.time() * 1000)


def new_id():
    return str(uuid.uuid4())


@dataclass
class ProjectData:
    id: str
    name: str
    last_modified: int
    config: GridConfig = field(default_factory=GridConfig)
    image_origin: Point = Point(0.0, 0.0)
    image_blob: Optional[bytes] = None
    hex_data: List[list] = field(default_factory=list)
    markers: List[list] = field(default_factory=list)
    assets: List[list] = field(default_factory=list)
    folder_id: Optional[str] = None
    is_archived: bool = False

    def to_dict(self):
        return {
            "id": self.id,
            "folderId": self.folder_id,
            "name": self.name,
            "lastModified": self.last_modified,
            "imageBlob": base64.b64encode(self.image_blob).decode("ascii") if self.image_blob else None,
            "imageOrigin": {"x": self.image_origin[0], "y": self.image_origin[1]},
            "config": self.config.to_dict(),
            "hexData": self.hex_data,
            "markers": self.markers,
            "assets": self.assets,
            "isArchived": self.is_archived,
        }

    @classmethod
    def from_dict(cls, payload):
        origin = payload.get("imageOrigin") or {}
        blob = payload.get("imageBlob")
        return cls(
            id=payload["id"],
            folder_id=payload.get("folderId"),
            name=payload.get("name", "Untitled Project"),
            last_modified=int(payload.get("lastModified", 0)),
            image_blob=base64.b64decode(blob) if blob else None,
            image_origin=Point(float(origin.get("x", 0)), float(origin.get("y", 0))),
            config=GridConfig.from_dict(payload.get("config")),
            hex_data=payload.get("hexData") or [],
            markers=payload.get("markers") or [],
            assets=payload.get("assets") or [],
            is_archived=bool(payload.get("isArchived", False)),
        )


@dataclass
class Folder:
    id: str
    name: str
    color: str = "indigo"
    icon: str = "folder"
    created_at: int = field(default_factory=now_ms)
    is_archived: bool = False

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "createdAt": self.created_at,
            "isArchived": self.is_archived,
        }

    @classmethod
    def from_dict(cls, payload):
        return cls(
            id=payload["id"],
            name=payload.get("name", "Folder"),
            color=payload.get("color", "indigo"),
            icon=payload.get("icon", "folder"),
            created_at=int(payload.get("createdAt", 0)),
            is_archived=bool(payload.get("isArchived", False)),
        )
