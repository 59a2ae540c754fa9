"""Buildable geometry API schemas."""

from typing import List, Optional

from pydantic import Field, field_validator

from .common import CamelModel, LocalPointModel
from .compliance import GridOffsetModel


class BuildableRequest(CamelModel):
    """Parcel ring in WGS84 plus the zone it lies in."""
    ring: List[List[float]] = Field(..., description="GeoJSON ring of [lng, lat] pairs")
    zone_type: str
    area: float = Field(..., description="Official parcel area (m²)")
    setback: Optional[float] = Field(None, ge=0, description="Uniform setback (m)")
    grid_offset: GridOffsetModel = Field(default_factory=GridOffsetModel)
    rect_steps: int = Field(60, ge=1, description="Row samples for the inscribed rectangle")

    @field_validator("ring")
    @classmethod
    def validate_ring(cls, v: List[List[float]]) -> List[List[float]]:
        for point in v:
            if len(point) < 2:
                raise ValueError("ring positions must be [lng, lat]")
        return v


class RowSpanModel(CamelModel):
    gz: int
    min_gx: int
    max_gx: int
    z: float
    min_x: float
    max_x: float


class FloorModel(CamelModel):
    floor: int
    cell_count: int
    area: float
    max_z: Optional[float] = None
    row_spans: List[RowSpanModel]


class RectModel(CamelModel):
    min_x: float
    max_x: float
    min_z: float
    max_z: float
    area: float


class BuildableResponse(CamelModel):
    parcel_polygon: List[LocalPointModel]
    regulation_polygon: List[LocalPointModel]
    footprint_polygon: List[LocalPointModel]
    parcel_area: float
    regulation_area: float
    footprint_area: float
    cell_count: int
    floor_count: int
    volume_height: float
    solar_north_z: Optional[float] = None
    floors: List[FloorModel]
    largest_rect: RectModel
