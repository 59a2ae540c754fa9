"""Shared API schema base and parcel payload."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from siteplan.regulations.engine import ParcelInput


class CamelModel(BaseModel):
    """Accepts camelCase keys on the wire and snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParcelRequest(CamelModel):
    """Parcel size and zone; area and zone type are checked by the engine."""
    area: float = Field(..., description="Parcel area (m²)")
    zone_type: str = Field(..., description="Zone type, e.g. ZONE_R2_GENERAL")
    width: Optional[float] = Field(None, gt=0, description="Parcel width (m)")
    depth: Optional[float] = Field(None, gt=0, description="Parcel depth (m)")

    def to_parcel_input(self) -> ParcelInput:
        """Validate against the zone table; raises RegulationInputError."""
        return ParcelInput(
            area=self.area,
            zone_type=self.zone_type,
            width=self.width,
            depth=self.depth,
        )


class LocalPointModel(CamelModel):
    """Point in meters relative to the parcel centroid."""
    x: float
    z: float
