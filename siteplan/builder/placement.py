"""
Placement aggregation for the module builder.

Reduces the list of placed modules to the PlacementSummary the compliance
checker scores, and finds modules that overlap on the same floor.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from siteplan.config import DEFAULT_FLOOR_HEIGHT_M, DEFAULT_GRID_SIZE_M, DEFAULT_MAX_GRID_CELLS
from siteplan.geometry.grid import grid_to_world, occupied_cells, rotated_dimensions
from siteplan.geometry.polygon import LocalPoint, is_rect_in_polygon
from siteplan.regulations.compliance import PlacementSummary

logger = logging.getLogger(__name__)

VALID_ROTATIONS = (0, 90, 180, 270)


@dataclass(frozen=True)
class ModuleDefinition:
    """Physical module from the catalog."""
    id: str
    name: str
    width: float  # m
    depth: float  # m
    height: float  # m
    grid_width: int  # cells
    grid_depth: int  # cells
    base_price: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping) -> "ModuleDefinition":
        """Build from a catalog record (camelCase or snake_case keys)."""
        def pick(snake, camel, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            id=data["id"],
            name=pick("name", "name", data["id"]),
            width=float(data["width"]),
            depth=float(data["depth"]),
            height=float(data["height"]),
            grid_width=int(pick("grid_width", "gridWidth")),
            grid_depth=int(pick("grid_depth", "gridDepth")),
            base_price=float(pick("base_price", "basePrice", 0.0)),
        )


@dataclass(frozen=True)
class ModulePlacement:
    """A module instance on the grid."""
    module_id: str
    grid_x: int
    grid_z: int
    rotation: int = 0
    floor: int = 1

    def __post_init__(self):
        if self.rotation not in VALID_ROTATIONS:
            raise ValueError(f"Rotation must be one of {VALID_ROTATIONS}, got {self.rotation}")
        if self.floor < 1:
            raise ValueError(f"Floor must be >= 1, got {self.floor}")


class ModuleCatalog:
    """Lookup of module definitions by id."""

    def __init__(self, modules: Iterable[ModuleDefinition] = ()):
        self._modules: Dict[str, ModuleDefinition] = {m.id: m for m in modules}

    @classmethod
    def from_dicts(cls, records: Iterable[Mapping]) -> "ModuleCatalog":
        return cls(ModuleDefinition.from_dict(r) for r in records)

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._modules.get(module_id)

    def __getitem__(self, module_id: str) -> ModuleDefinition:
        return self._modules[module_id]

    def __contains__(self, module_id) -> bool:
        return module_id in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self):
        return iter(self._modules.values())


def summarize_placements(
    placements: Sequence[ModulePlacement],
    catalog: ModuleCatalog,
    parcel_area: float,
    buildable_polygon: Optional[Sequence[LocalPoint]] = None,
    grid_size: float = DEFAULT_GRID_SIZE_M,
    offset_x: float = 0.0,
    offset_z: float = 0.0,
    floor_height: float = DEFAULT_FLOOR_HEIGHT_M,
) -> PlacementSummary:
    """
    Aggregate placed modules into a PlacementSummary.

    Floor area counts every module; the footprint is the largest summed
    module area of any single floor. Height is the top of the highest
    module, floors stacking at floor_height.

    Args:
        placements: Placed modules
        catalog: Module definitions; unknown ids are skipped
        parcel_area: Parcel area (m²)
        buildable_polygon: Boundary each module must stay inside; no check
                           when None
        grid_size: Cell edge length (m)
        offset_x, offset_z: Grid origin in local meters
        floor_height: Floor-to-floor height (m)

    Returns:
        PlacementSummary
    """
    total_floor_area = 0.0
    max_height = 0.0
    max_floor = 0
    all_within = True
    floor_footprints: Dict[int, float] = {}

    for p in placements:
        module = catalog.get(p.module_id)
        if module is None:
            logger.warning(f"Skipping placement of unknown module '{p.module_id}'")
            continue

        area = module.width * module.depth
        total_floor_area += area
        floor_footprints[p.floor] = floor_footprints.get(p.floor, 0.0) + area

        top = (p.floor - 1) * floor_height + module.height
        max_height = max(max_height, top)
        max_floor = max(max_floor, p.floor)

        if buildable_polygon is not None and all_within:
            x, z = grid_to_world(p.grid_x, p.grid_z, grid_size, offset_x, offset_z)
            width, depth = rotated_dimensions(module.width, module.depth, p.rotation)
            if not is_rect_in_polygon(x, z, width, depth, buildable_polygon):
                all_within = False

    total_footprint_area = max(floor_footprints.values(), default=0.0)

    return PlacementSummary(
        total_footprint_area=total_footprint_area,
        total_floor_area=total_floor_area,
        max_height=max_height,
        max_floor=max_floor,
        all_within_boundary=all_within,
        parcel_area=parcel_area,
    )


def find_collisions(
    placements: Sequence[ModulePlacement],
    catalog: ModuleCatalog,
    max_cells: int = DEFAULT_MAX_GRID_CELLS,
) -> List[Tuple[int, int]]:
    """
    Pairs of placement indices that share a grid cell on the same floor.

    At most max_cells cells are expanded over the whole list; a placement
    whose footprint does not fit the remaining budget is skipped with a
    warning.

    Returns:
        Sorted (i, j) pairs with i < j
    """
    owners: Dict[Tuple[int, int, int], List[int]] = {}
    collisions = set()
    budget = max_cells

    for index, p in enumerate(placements):
        module = catalog.get(p.module_id)
        if module is None:
            continue
        footprint = max(module.grid_width, 0) * max(module.grid_depth, 0)
        if footprint > budget:
            logger.warning(
                f"Skipping collision check for placement {index}: "
                f"{footprint} cells exceeds remaining limit {budget}"
            )
            continue
        budget -= footprint
        cells = occupied_cells(
            p.grid_x, p.grid_z, module.grid_width, module.grid_depth, p.rotation, max_cells=max_cells
        )
        for gx, gz in cells:
            key = (p.floor, gx, gz)
            for other in owners.setdefault(key, []):
                collisions.add((other, index))
            owners[key].append(index)

    return sorted(collisions)
