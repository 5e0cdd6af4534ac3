import logging
import math
from enum import Enum
from typing import Callable, List, NamedTuple

log = logging.getLogger(__name__)

SQRT_3 = math.sqrt(3)

# Triangles are drawn a little larger than hexes of the same radius
TRIANGLE_SCALE = 2.5


class GridType(str, Enum):
    HEX_FLAT = "hex_flat"
    SQUARE = "square"
    TRIANGLE = "triangle"


class Point(NamedTuple):
    x: float
    y: float


class AxialCoord(NamedTuple):
    q: int
    r: int


def round_half_up(value):
    return int(math.floor(value + 0.5))


def rotate_point(x, y, angle_deg):
    if angle_deg == 0:
        return x, y
    rad = math.radians(angle_deg)
    cos, sin = math.cos(rad), math.sin(rad)
    return x * cos - y * sin, x * sin + y * cos


def _to_world(x, y, config):
    rx, ry = rotate_point(x, y, config.rotation)
    return Point(rx + config.offset_x, ry + config.offset_y)


def _to_local(x, y, config):
    return rotate_point(x - config.offset_x, y - config.offset_y, -config.rotation)


def _polygon(center, dist, angles, rotation, dy=0.0):
    corners = []
    for angle in angles:
        rad = math.radians(angle + rotation)
        corners.append(Point(center.x + dist * math.cos(rad),
                             center.y + dist * math.sin(rad) + dy))
    return corners


def _box(center, rng):
    return [AxialCoord(center.q + dq, center.r + dr)
            for dq in range(-rng, rng + 1)
            for dr in range(-rng, rng + 1)]


# --- Hexagon (flat top) ---

def axial_round(q, r):
    """
    Rounds fractional hex coordinates to the nearest integer hex.
    """
    s = -q - r
    rq, rr, rs = round_half_up(q), round_half_up(r), round_half_up(s)

    q_diff = abs(rq - q)
    r_diff = abs(rr - r)
    s_diff = abs(rs - s)

    if q_diff > r_diff and q_diff > s_diff:
        rq = -rr - rs
    elif r_diff > s_diff:
        rr = -rq - rs
    # else s is unchanged (implied)

    return AxialCoord(rq, rr)


def hex_to_pixel(q, r, config):
    """
    Converts axial hex coordinates (q, r) to world pixel coordinates.
    """
    x = config.radius * (3 / 2 * q)
    y = config.radius * (SQRT_3 / 2 * q + SQRT_3 * r)
    return _to_world(x, y, config)


def pixel_to_hex(x, y, config):
    """
    Converts world pixel coordinates to the axial hex containing them.
    """
    lx, ly = _to_local(x, y, config)
    q = (2 / 3 * lx) / config.radius
    r = (-1 / 3 * lx + SQRT_3 / 3 * ly) / config.radius
    return axial_round(q, r)


def hex_corners(center, radius, rotation, coord=None):
    return _polygon(center, radius, [60 * i for i in range(6)], rotation)


def hex_range(center, rng):
    # q + r + s = 0 constrained disk
    results = []
    for dq in range(-rng, rng + 1):
        for dr in range(max(-rng, -dq - rng), min(rng, -dq + rng) + 1):
            results.append(AxialCoord(center.q + dq, center.r + dr))
    return results


def hex_distance(a, b):
    return (abs(a.q - b.q) + abs(a.q + a.r - b.q - b.r) + abs(a.r - b.r)) / 2


# --- Square ---

def square_to_pixel(q, r, config):
    # Side is 2 * radius so squares read the same size as hexes
    size = config.radius * 2
    return _to_world(q * size, r * size, config)


def pixel_to_square(x, y, config):
    lx, ly = _to_local(x, y, config)
    size = config.radius * 2
    return AxialCoord(round_half_up(lx / size), round_half_up(ly / size))


def square_corners(center, radius, rotation, coord=None):
    return _polygon(center, radius * math.sqrt(2), [45, 135, 225, 315], rotation)


def square_distance(a, b):
    # Chebyshev: diagonal steps cost 1
    return max(abs(a.q - b.q), abs(a.r - b.r))


# --- Triangle ---

def _triangle_metrics(radius):
    side = radius * TRIANGLE_SCALE
    return side, side * (SQRT_3 / 2)


def triangle_to_pixel(q, r, config):
    side, height = _triangle_metrics(config.radius)
    x_offset = side / 2 if r % 2 != 0 else 0
    return _to_world(q * side + x_offset, r * height, config)


def pixel_to_triangle(x, y, config):
    lx, ly = _to_local(x, y, config)
    side, height = _triangle_metrics(config.radius)
    r = round_half_up(ly / height)
    x_offset = side / 2 if abs(r) % 2 == 1 else 0
    return AxialCoord(round_half_up((lx - x_offset) / side), r)


def triangle_corners(center, radius, rotation, coord=None):
    side, height = _triangle_metrics(radius)
    circumradius = side / SQRT_3
    # Point-up triangle, nudged down so the centroid sits on the cell center
    return _polygon(center, circumradius, [270, 30, 150], rotation, dy=height / 6)


def triangle_distance(a, b):
    return abs(a.q - b.q) + abs(a.r - b.r)


class GridStrategy(NamedTuple):
    to_pixel: Callable
    to_cell: Callable
    get_corners: Callable
    get_neighbors: Callable
    get_distance: Callable


HEX_STRATEGY = GridStrategy(hex_to_pixel, pixel_to_hex, hex_corners, hex_range, hex_distance)
SQUARE_STRATEGY = GridStrategy(square_to_pixel, pixel_to_square, square_corners, _box, square_distance)
TRIANGLE_STRATEGY = GridStrategy(triangle_to_pixel, pixel_to_triangle, triangle_corners, _box, triangle_distance)

STRATEGIES = {
    GridType.HEX_FLAT: HEX_STRATEGY,
    GridType.SQUARE: SQUARE_STRATEGY,
    GridType.TRIANGLE: TRIANGLE_STRATEGY,
}


def get_strategy(grid_type) -> GridStrategy:
    """Returns the strategy for a grid type, falling back to hexes for unknown types."""
    try:
        return STRATEGIES[GridType(grid_type)]
    except ValueError:
        log.warning("Unknown grid type %r, falling back to %s", grid_type, GridType.HEX_FLAT.value)
        return HEX_STRATEGY


def to_pixel(q, r, config) -> Point:
    return get_strategy(config.grid_type).to_pixel(q, r, config)


def to_cell(x, y, config) -> AxialCoord:
    return get_strategy(config.grid_type).to_cell(x, y, config)


def get_corners(center, config, coord=None) -> List[Point]:
    return get_strategy(config.grid_type).get_corners(center, config.radius, config.rotation, coord)


def get_neighbors(center, rng, config) -> List[AxialCoord]:
    return get_strategy(config.grid_type).get_neighbors(AxialCoord(*center), rng)


def get_distance(a, b, config) -> float:
    return get_strategy(config.grid_type).get_distance(AxialCoord(*a), AxialCoord(*b))


def cell_polygon(coord, config):
    """Center and corner list of a cell in world space."""
    center = to_pixel(coord[0], coord[1], config)
    return center, get_corners(center, config, AxialCoord(*coord))
