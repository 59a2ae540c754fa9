"""
Buildable envelope per floor.

Combines the regulation layers into what the builder shows and checks
placements against:
1. Regulation polygon: parcel inset by the setback
2. Placeable cells: grid cells inside the regulation polygon
3. Footprint polygon: regulation polygon shrunk to the coverage cap
4. Floor count: floor area ratio / footprint, capped by floor and height limits
5. Solar stepping: upper floors of residential zones lose their
   northern rows above 9 m
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from siteplan.config import (
    DEFAULT_FLOOR_HEIGHT_M,
    DEFAULT_GRID_SIZE_M,
    DEFAULT_MAX_GRID_CELLS,
    DEFAULT_SETBACK_M,
)
from siteplan.geometry.grid import (
    CellSet,
    Edge3,
    RowSpan,
    cells_boundary_edges,
    cells_to_row_spans,
    clip_cells_north,
    floor_to_world_y,
    grid_cells_in_polygon,
)
from siteplan.geometry.polygon import (
    DEFAULT_RECT_STEPS,
    MAX_RECT_STEPS,
    InsetCache,
    LocalPoint,
    Polygon,
    Rect,
    max_inscribed_rect,
    polygon_area,
    polygon_bounds,
    polygon_inset,
    polygon_signed_area,
    scale_polygon,
)
from siteplan.regulations.engine import RegulationResult
from siteplan.regulations.solar import BASE_HEIGHT_M, applies_to_zone, solar_max_z

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloorEnvelope:
    """Placeable cells of one floor after solar stepping."""
    floor: int
    cells: CellSet
    area: float  # m²
    max_z: Optional[float] = None  # northern limit when solar-clipped


@dataclass
class BuildableEnvelope:
    """Per-floor buildable volume of a parcel."""
    regulation_polygon: Polygon
    footprint_polygon: Polygon
    footprint_area: float
    cells: CellSet
    floors: List[FloorEnvelope] = field(default_factory=list)
    solar_north_z: Optional[float] = None
    grid_size: float = DEFAULT_GRID_SIZE_M
    offset_x: float = 0.0
    offset_z: float = 0.0
    floor_height: float = DEFAULT_FLOOR_HEIGHT_M

    @property
    def floor_count(self) -> int:
        return len(self.floors)

    @property
    def volume_height(self) -> float:
        return self.floor_count * self.floor_height

    @property
    def total_floor_area(self) -> float:
        return sum(f.area for f in self.floors)

    @property
    def is_empty(self) -> bool:
        return not self.cells

    def floor(self, number: int) -> Optional[FloorEnvelope]:
        for f in self.floors:
            if f.floor == number:
                return f
        return None

    def row_spans(self, number: int) -> List[RowSpan]:
        """Row spans of a floor's cells, for filled floor plates."""
        f = self.floor(number)
        if f is None:
            return []
        return cells_to_row_spans(f.cells, self.grid_size, self.offset_x, self.offset_z)

    def wireframe(self, number: int) -> List[Edge3]:
        """Outline of a floor's cells at the floor's base height."""
        f = self.floor(number)
        if f is None:
            return []
        y = floor_to_world_y(number, self.floor_height)
        return cells_boundary_edges(f.cells, self.grid_size, self.offset_x, self.offset_z, y)

    def largest_rect(self, steps: int = DEFAULT_RECT_STEPS, max_steps: int = MAX_RECT_STEPS) -> Rect:
        """Largest axis-aligned rectangle inside the regulation polygon."""
        return max_inscribed_rect(self.regulation_polygon, steps, max_steps)


def _shrinks(parcel: Sequence[LocalPoint], inset: Sequence[LocalPoint]) -> bool:
    """False when the inset collapsed or overshot past the opposite sides."""
    if len(inset) < 3:
        return False
    if polygon_signed_area(inset) * polygon_signed_area(parcel) <= 0:
        return False
    return polygon_area(inset) < polygon_area(parcel)


def _floors_from_limits(
    regulation: RegulationResult,
    footprint_area: float,
) -> int:
    if footprint_area <= 0:
        return 0
    floors_from_far = math.floor(regulation.max_total_floor_area / footprint_area)
    cap = regulation.effective_max_floors if regulation.effective_max_floors > 0 else math.inf
    return int(min(floors_from_far, cap))


def compute_buildable_envelope(
    parcel_polygon: Sequence[LocalPoint],
    regulation: RegulationResult,
    setback: float = DEFAULT_SETBACK_M,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
    floor_height: float = DEFAULT_FLOOR_HEIGHT_M,
    max_cells: int = DEFAULT_MAX_GRID_CELLS,
    inset_cache: Optional[InsetCache] = None,
) -> BuildableEnvelope:
    """
    Compute the buildable envelope of a parcel.

    Args:
        parcel_polygon: Parcel boundary in local meters
        regulation: Limits for the parcel
        setback: Uniform setback from the parcel boundary (m)
        grid_size: Cell edge length (m)
        offset_x, offset_z: Grid origin in local meters
        floor_height: Floor-to-floor height (m)
        max_cells: Rasterization limit
        inset_cache: Optional caller-owned inset memo

    Returns:
        BuildableEnvelope; empty when the setback consumes the parcel
    """
    if inset_cache is not None:
        regulation_polygon = inset_cache.inset(parcel_polygon, setback)
    else:
        regulation_polygon = polygon_inset(parcel_polygon, setback)

    if len(regulation_polygon) < 3 or (setback > 0 and not _shrinks(parcel_polygon, regulation_polygon)):
        logger.warning(f"Setback of {setback}m leaves no buildable polygon")
        return BuildableEnvelope(
            regulation_polygon=[],
            footprint_polygon=[],
            footprint_area=0.0,
            cells=CellSet(),
            grid_size=grid_size,
            offset_x=offset_x,
            offset_z=offset_z,
            floor_height=floor_height,
        )

    cells = grid_cells_in_polygon(regulation_polygon, grid_size, offset_x, offset_z, max_cells)

    # Shrink toward the centroid until the footprint fits the coverage cap
    regulation_area = polygon_area(regulation_polygon)
    max_footprint = regulation.max_building_footprint
    footprint_polygon = list(regulation_polygon)
    footprint_area = regulation_area
    if regulation_area > max_footprint:
        footprint_polygon = scale_polygon(regulation_polygon, math.sqrt(max_footprint / regulation_area))
        footprint_area = max_footprint

    floor_count = _floors_from_limits(regulation, footprint_area)
    volume_height = floor_count * floor_height

    solar_north_z = None
    if applies_to_zone(regulation.zone_type) and volume_height > BASE_HEIGHT_M:
        solar_north_z = polygon_bounds(regulation_polygon).max_z

    floors: List[FloorEnvelope] = []
    for number in range(1, floor_count + 1):
        ceiling = number * floor_height
        floor_cells = cells
        max_z = None
        if solar_north_z is not None and ceiling > BASE_HEIGHT_M:
            max_z = solar_max_z(solar_north_z, ceiling)
            floor_cells = clip_cells_north(cells, grid_size, offset_z, max_z)
        if not floor_cells:
            break
        floors.append(FloorEnvelope(number, floor_cells, floor_cells.area(grid_size), max_z))

    logger.info(
        f"Buildable envelope: {len(cells)} cells, footprint {footprint_area:.1f}m², "
        f"{len(floors)}/{floor_count} floors"
        + (f", solar line z={solar_north_z:.2f}" if solar_north_z is not None else "")
    )

    return BuildableEnvelope(
        regulation_polygon=regulation_polygon,
        footprint_polygon=footprint_polygon,
        footprint_area=footprint_area,
        cells=cells,
        floors=floors,
        solar_north_z=solar_north_z,
        grid_size=grid_size,
        offset_x=offset_x,
        offset_z=offset_z,
        floor_height=floor_height,
    )
