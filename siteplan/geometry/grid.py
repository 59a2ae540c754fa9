"""
Construction grid rasterization.

Turns a buildable polygon into the set of 0.6 m cells modules may occupy,
and derives row spans, wireframe edges and clipped grid lines from a cell
set. A cell (gx, gz) covers [gx*g + ox, (gx+1)*g + ox) in x and the same in
z; it belongs to a polygon when its center is inside.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from siteplan.config import (
    DEFAULT_FLOOR_HEIGHT_M,
    DEFAULT_GRID_SIZE_M,
    DEFAULT_MAX_GRID_CELLS,
)

from .polygon import (
    LocalPoint,
    clip_horizontal_line,
    clip_vertical_line,
    Rect,
    polygon_bounds,
)

logger = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF
_SIGN32 = 0x80000000

# Cell coordinates must fit a signed 32-bit half of the packed key
GRID_COORD_MIN = -(1 << 31)
GRID_COORD_MAX = (1 << 31) - 1

# Every sixth grid line (3.6 m) is drawn as a major line
MAJOR_LINE_INTERVAL = 6

Cell = Tuple[int, int]
Point3 = Tuple[float, float, float]
Edge3 = Tuple[Point3, Point3]


# ============================================================================
# Cell keys
# ============================================================================

def cell_in_range(gx: int, gz: int) -> bool:
    return GRID_COORD_MIN <= gx <= GRID_COORD_MAX and GRID_COORD_MIN <= gz <= GRID_COORD_MAX


def pack_cell(gx: int, gz: int) -> int:
    """
    Pack a cell into one 64-bit key: gx in the high half, gz in the low.

    Raises:
        ValueError: if either coordinate is outside the signed 32-bit range
    """
    if not cell_in_range(gx, gz):
        raise ValueError(f"Cell ({gx}, {gz}) is outside the 32-bit grid range")
    return ((gx & _MASK32) << 32) | (gz & _MASK32)


def _to_signed32(value: int) -> int:
    return value - (1 << 32) if value & _SIGN32 else value


def unpack_cell(key: int) -> Cell:
    """Inverse of pack_cell."""
    return _to_signed32((key >> 32) & _MASK32), _to_signed32(key & _MASK32)


class CellSet:
    """
    Set of grid cells stored as packed integer keys.

    Membership takes (gx, gz) tuples; iteration is row-major (gz, then gx)
    so derived geometry is deterministic. Cells outside the signed 32-bit
    range are dropped on construction and are never members.
    """

    __slots__ = ("_keys",)

    def __init__(self, cells: Iterable[Cell] = ()):
        keys = set()
        dropped = 0
        for gx, gz in cells:
            if cell_in_range(gx, gz):
                keys.add(pack_cell(gx, gz))
            else:
                dropped += 1
        if dropped:
            logger.warning(f"Dropped {dropped} cell(s) outside the 32-bit grid range")
        self._keys = keys

    @classmethod
    def from_keys(cls, keys: Iterable[int]) -> "CellSet":
        cell_set = cls()
        cell_set._keys = set(keys)
        return cell_set

    @property
    def keys(self) -> frozenset:
        return frozenset(self._keys)

    def add(self, gx: int, gz: int):
        self._keys.add(pack_cell(gx, gz))

    def copy(self) -> "CellSet":
        return CellSet.from_keys(self._keys)

    def area(self, grid_size: float = DEFAULT_GRID_SIZE_M) -> float:
        """Covered area in m²."""
        return len(self._keys) * grid_size * grid_size

    def __contains__(self, cell) -> bool:
        gx, gz = cell
        return cell_in_range(gx, gz) and pack_cell(gx, gz) in self._keys

    def __iter__(self) -> Iterator[Cell]:
        cells = [unpack_cell(k) for k in self._keys]
        cells.sort(key=lambda c: (c[1], c[0]))
        return iter(cells)

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CellSet):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        return f"CellSet({len(self._keys)} cells)"


@dataclass(frozen=True)
class GridBounds:
    """Inclusive integer bounds of a cell set."""
    min_gx: int
    max_gx: int
    min_gz: int
    max_gz: int


@dataclass(frozen=True)
class RowSpan:
    """
    Contiguous run of cells in one grid row.

    World coordinates give the south edge of the row and the outer x edges
    of the first and last cell.
    """
    gz: int
    min_gx: int
    max_gx: int
    z: float
    min_x: float
    max_x: float

    @property
    def cell_count(self) -> int:
        return self.max_gx - self.min_gx + 1


@dataclass(frozen=True)
class GridLine:
    """Grid line segment clipped to a polygon; start/end are (x, z)."""
    axis: str  # "x" = constant x (runs north-south), "z" = constant z
    index: int
    start: Tuple[float, float]
    end: Tuple[float, float]
    major: bool


# ============================================================================
# Rasterization
# ============================================================================

def _grid_is_usable(grid_size: float, offset_x: float, offset_z: float) -> bool:
    """Grid size must be positive and finite, offsets finite."""
    if not (math.isfinite(grid_size) and grid_size > 0):
        logger.warning(f"Grid size {grid_size} must be a positive finite number")
        return False
    if not (math.isfinite(offset_x) and math.isfinite(offset_z)):
        logger.warning(f"Grid offset ({offset_x}, {offset_z}) must be finite")
        return False
    return True


def _index_range(
    bounds: Rect,
    grid_size: float,
    offset_x: float,
    offset_z: float,
) -> Optional[Tuple[int, int, int, int]]:
    """
    Integer cell bounds covering a polygon bounding box.

    None when the division overflows or the cells leave the 32-bit range,
    so each candidate cell (expanded by one on every side) is packable.
    """
    scaled = (
        (bounds.min_x - offset_x) / grid_size,
        (bounds.max_x - offset_x) / grid_size,
        (bounds.min_z - offset_z) / grid_size,
        (bounds.max_z - offset_z) / grid_size,
    )
    if not all(math.isfinite(v) for v in scaled):
        logger.warning("Grid indices overflow for this polygon and offset")
        return None
    min_gx, max_gx = math.floor(scaled[0]), math.ceil(scaled[1])
    min_gz, max_gz = math.floor(scaled[2]), math.ceil(scaled[3])
    if not (cell_in_range(min_gx - 1, min_gz - 1) and cell_in_range(max_gx + 1, max_gz + 1)):
        logger.warning("Grid indices fall outside the 32-bit grid range")
        return None
    return min_gx, max_gx, min_gz, max_gz


def grid_cells_in_polygon(
    polygon: Sequence[LocalPoint],
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
    max_cells: int = DEFAULT_MAX_GRID_CELLS,
) -> CellSet:
    """
    Rasterize a polygon onto the construction grid.

    The polygon's bounding box, expanded by one cell on every side, is
    scanned and every cell whose center passes the ray-casting test is
    kept. Partial overlap is ignored. The inside test is evaluated for all
    candidate centers at once with numpy, edge by edge.

    Args:
        polygon: Buildable polygon in local meters
        grid_size: Cell edge length (m)
        offset_x, offset_z: World position of cell (0, 0)'s origin corner
        max_cells: Largest candidate box that will be scanned

    Returns:
        CellSet of included cells; empty for degenerate input or when the
        candidate box exceeds max_cells
    """
    if len(polygon) < 3 or not _grid_is_usable(grid_size, offset_x, offset_z):
        return CellSet()

    bounds = polygon_bounds(polygon)
    if bounds is None:
        logger.warning("Cannot rasterize polygon with non-finite coordinates")
        return CellSet()

    index_range = _index_range(bounds, grid_size, offset_x, offset_z)
    if index_range is None:
        return CellSet()
    min_gx, max_gx, min_gz, max_gz = index_range
    min_gx -= 1
    max_gx += 1
    min_gz -= 1
    max_gz += 1

    nx = max_gx - min_gx + 1
    nz = max_gz - min_gz + 1
    if nx * nz > max_cells:
        logger.warning(
            f"Rasterization skipped: {nx}x{nz} candidate cells exceeds limit {max_cells}"
        )
        return CellSet()

    gx_range = np.arange(min_gx, max_gx + 1)
    gz_range = np.arange(min_gz, max_gz + 1)
    cx = gx_range * grid_size + offset_x + grid_size / 2
    cz = gz_range * grid_size + offset_z + grid_size / 2
    px, pz = np.meshgrid(cx, cz)

    inside = np.zeros(px.shape, dtype=bool)
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, zi = polygon[i].x, polygon[i].z
        xj, zj = polygon[j].x, polygon[j].z
        j = i
        if zi == zj:
            # Horizontal edge never straddles a center row
            continue
        straddles = (zi > pz) != (zj > pz)
        x_cross = (xj - xi) * (pz - zi) / (zj - zi) + xi
        inside ^= straddles & (px < x_cross)

    rows, cols = np.nonzero(inside)
    cells = CellSet.from_keys(
        pack_cell(int(gx_range[c]), int(gz_range[r])) for r, c in zip(rows, cols)
    )

    logger.debug(f"Rasterized polygon into {len(cells)} cells ({nx}x{nz} scanned)")
    return cells


def cells_to_row_spans(
    cells: CellSet,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
) -> List[RowSpan]:
    """
    Collapse each row of cells into maximal contiguous runs.

    A row with a gap yields one span per run. Spans are ordered by row,
    then west to east.
    """
    rows: Dict[int, List[int]] = {}
    for gx, gz in cells:
        rows.setdefault(gz, []).append(gx)

    spans = []
    for gz in sorted(rows):
        xs = sorted(rows[gz])
        run_start = prev = xs[0]
        for gx in xs[1:] + [None]:
            if gx is not None and gx == prev + 1:
                prev = gx
                continue
            spans.append(RowSpan(
                gz=gz,
                min_gx=run_start,
                max_gx=prev,
                z=gz * grid_size + offset_z,
                min_x=run_start * grid_size + offset_x,
                max_x=(prev + 1) * grid_size + offset_x,
            ))
            if gx is not None:
                run_start = prev = gx
    return spans


def cells_boundary_edges(
    cells: CellSet,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
    y: float = 0.0,
) -> List[Edge3]:
    """
    Wireframe outline of a cell set at height y.

    Emits one segment for every cell side whose neighbor is absent.
    Segments are ((x1, y, z1), (x2, y, z2)).
    """
    edges: List[Edge3] = []
    for gx, gz in cells:
        x0 = gx * grid_size + offset_x
        z0 = gz * grid_size + offset_z
        x1 = x0 + grid_size
        z1 = z0 + grid_size

        if (gx, gz - 1) not in cells:
            edges.append(((x0, y, z0), (x1, y, z0)))
        if (gx, gz + 1) not in cells:
            edges.append(((x0, y, z1), (x1, y, z1)))
        if (gx - 1, gz) not in cells:
            edges.append(((x0, y, z0), (x0, y, z1)))
        if (gx + 1, gz) not in cells:
            edges.append(((x1, y, z0), (x1, y, z1)))
    return edges


def cells_bounds(cells: CellSet) -> Optional[GridBounds]:
    """Integer bounding box of occupied cells, or None if empty."""
    if not cells:
        return None
    gxs = [gx for gx, _ in cells]
    gzs = [gz for _, gz in cells]
    return GridBounds(min(gxs), max(gxs), min(gzs), max(gzs))


def clip_cells_north(
    cells: CellSet,
    grid_size: float,
    offset_z: float,
    max_z: float,
) -> CellSet:
    """Drop cells whose center lies north of max_z. Returns a new set."""
    half = grid_size / 2
    return CellSet(
        (gx, gz) for gx, gz in cells if gz * grid_size + offset_z + half <= max_z
    )


def cells_outside(cells: Iterable[Cell], allowed: CellSet) -> CellSet:
    """Cells from `cells` that are not part of `allowed`."""
    return CellSet(c for c in cells if c not in allowed)


# ============================================================================
# Grid coordinates
# ============================================================================

def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def world_to_grid(
    x: float,
    z: float,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
) -> Cell:
    """Nearest grid point to a world position (halves round up)."""
    return (
        _round_half_up((x - offset_x) / grid_size),
        _round_half_up((z - offset_z) / grid_size),
    )


def grid_to_world(
    gx: int,
    gz: int,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
) -> Tuple[float, float]:
    """World position of a grid point (cell origin corner)."""
    return gx * grid_size + offset_x, gz * grid_size + offset_z


def snap_to_grid(
    x: float,
    z: float,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
) -> Tuple[float, float]:
    gx, gz = world_to_grid(x, z, grid_size, offset_x, offset_z)
    return grid_to_world(gx, gz, grid_size, offset_x, offset_z)


def floor_to_world_y(floor: int, floor_height: float = DEFAULT_FLOOR_HEIGHT_M) -> float:
    """Base height of a floor; floor 1 sits at y = 0."""
    return (floor - 1) * floor_height


# ============================================================================
# Module footprints
# ============================================================================

def rotated_dimensions(width, depth, rotation: int):
    """Width and depth after a quarter-turn rotation (90/270 swap them)."""
    if rotation % 180 == 90:
        return depth, width
    return width, depth


def occupied_cells(
    grid_x: int,
    grid_z: int,
    grid_width: int,
    grid_depth: int,
    rotation: int = 0,
    max_cells: int = DEFAULT_MAX_GRID_CELLS,
) -> CellSet:
    """
    Cells covered by a module whose origin cell is (grid_x, grid_z).

    Empty when the footprint spans more than max_cells cells. Cells past
    the 32-bit grid range are dropped.
    """
    w, d = rotated_dimensions(grid_width, grid_depth, rotation)
    if w * d > max_cells:
        logger.warning(f"Module footprint of {w}x{d} cells exceeds limit {max_cells}")
        return CellSet()
    return CellSet(
        (grid_x + dx, grid_z + dz) for dx in range(w) for dz in range(d)
    )


# ============================================================================
# Grid lines
# ============================================================================

def grid_lines_in_polygon(
    polygon: Sequence[LocalPoint],
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
    max_lines: int = DEFAULT_MAX_GRID_CELLS,
) -> List[GridLine]:
    """
    Grid lines over the polygon's bounding box, clipped to its interior.

    Vertical lines (constant x) come first, then horizontal lines. A line
    is major when its grid index is a multiple of six. Returns an empty
    list when more than max_lines lines would be clipped.
    """
    if len(polygon) < 3 or not _grid_is_usable(grid_size, offset_x, offset_z):
        return []
    bounds = polygon_bounds(polygon)
    if bounds is None:
        return []
    index_range = _index_range(bounds, grid_size, offset_x, offset_z)
    if index_range is None:
        return []
    min_gx, max_gx, min_gz, max_gz = index_range
    count = (max_gx - min_gx + 1) + (max_gz - min_gz + 1)
    if count > max_lines:
        logger.warning(f"Grid lines skipped: {count} lines exceeds limit {max_lines}")
        return []

    lines: List[GridLine] = []

    for index in range(min_gx, max_gx + 1):
        x = index * grid_size + offset_x
        for z1, z2 in clip_vertical_line(x, bounds.min_z, bounds.max_z, polygon):
            lines.append(GridLine("x", index, (x, z1), (x, z2), index % MAJOR_LINE_INTERVAL == 0))

    for index in range(min_gz, max_gz + 1):
        z = index * grid_size + offset_z
        for x1, x2 in clip_horizontal_line(z, bounds.min_x, bounds.max_x, polygon):
            lines.append(GridLine("z", index, (x1, z), (x2, z), index % MAJOR_LINE_INTERVAL == 0))

    return lines
