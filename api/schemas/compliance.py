"""Compliance API schemas."""

from typing import List, Optional

from pydantic import Field, field_validator

from siteplan.geometry.grid import GRID_COORD_MAX, GRID_COORD_MIN

from .common import CamelModel, LocalPointModel, ParcelRequest

# Largest module side in grid cells (600 m at 0.6 m cells)
MAX_MODULE_GRID_CELLS = 1000


class PlacementSummaryModel(CamelModel):
    """Aggregated placement state reported by the builder."""
    total_footprint_area: float = Field(..., ge=0)
    total_floor_area: float = Field(..., ge=0)
    max_height: float = Field(..., ge=0)
    max_floor: int = Field(..., ge=0)
    all_within_boundary: bool = True
    parcel_area: float = Field(..., ge=0)


class ComplianceCheckRequest(ParcelRequest):
    """Placement summary plus the parcel it is checked against."""
    summary: PlacementSummaryModel


class ModuleModel(CamelModel):
    """Catalog entry for a placeable module."""
    id: str
    name: str = ""
    width: float = Field(..., gt=0, description="Width (m)")
    depth: float = Field(..., gt=0, description="Depth (m)")
    height: float = Field(..., gt=0, description="Height (m)")
    grid_width: int = Field(..., ge=1, le=MAX_MODULE_GRID_CELLS)
    grid_depth: int = Field(..., ge=1, le=MAX_MODULE_GRID_CELLS)
    base_price: float = Field(0, ge=0)


class PlacementModel(CamelModel):
    """Module placed on the grid."""
    module_id: str
    grid_x: int = Field(..., ge=GRID_COORD_MIN, le=GRID_COORD_MAX)
    grid_z: int = Field(..., ge=GRID_COORD_MIN, le=GRID_COORD_MAX)
    rotation: int = 0
    floor: int = Field(1, ge=1)

    @field_validator("rotation")
    @classmethod
    def validate_rotation(cls, v: int) -> int:
        if v not in (0, 90, 180, 270):
            raise ValueError("rotation must be one of 0, 90, 180, 270")
        return v


class GridOffsetModel(CamelModel):
    """World position of cell (0, 0) in local meters."""
    x: float = Field(0.0, allow_inf_nan=False)
    z: float = Field(0.0, allow_inf_nan=False)


class PlacementCheckRequest(CamelModel):
    """Placements to aggregate and score."""
    parcel: ParcelRequest
    modules: List[ModuleModel]
    placements: List[PlacementModel]
    polygon: Optional[List[LocalPointModel]] = Field(
        None, description="Buildable boundary in local meters"
    )
    grid_offset: GridOffsetModel = Field(default_factory=GridOffsetModel)


class MetricModel(CamelModel):
    current: float
    max: float
    level: str


class BoundaryMetricModel(CamelModel):
    all_within: bool
    level: str


class ComplianceStatusResponse(CamelModel):
    overall: str
    coverage_ratio: MetricModel
    floor_area_ratio: MetricModel
    height: MetricModel
    floors: MetricModel
    boundary: BoundaryMetricModel
    messages: List[str]


class PlacementCheckResponse(CamelModel):
    summary: PlacementSummaryModel
    status: ComplianceStatusResponse
    collisions: List[List[int]]
