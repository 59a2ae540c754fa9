"""Regulation API schemas."""

from typing import List

from pydantic import Field

from .common import CamelModel, ParcelRequest


class RegulationCalculateRequest(ParcelRequest):
    """Request for parcel regulation limits."""


class RegulationResponse(CamelModel):
    """Flat regulation record consumed by the map and builder."""
    zone_type: str
    zone_name_ko: str
    max_coverage_ratio: float
    max_floor_area_ratio: float
    max_height: float
    max_floors: int
    setback_front: float
    setback_rear: float
    setback_left: float
    setback_right: float
    buildable_area: float
    max_building_footprint: float
    max_total_floor_area: float
    effective_max_floors: int


class ZoneInfo(CamelModel):
    """Zone table row."""
    zone_type: str
    name_ko: str
    max_coverage_ratio: float
    max_floor_area_ratio: float
    max_height: float
    max_floors: int
    setback_front: float
    setback_rear: float
    setback_left: float
    setback_right: float
    solar_access: bool = Field(..., description="North-line daylight limit applies")


class ZoneListResponse(CamelModel):
    zones: List[ZoneInfo]
