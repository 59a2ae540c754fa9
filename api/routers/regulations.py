"""
Zoning regulation API router.

Derives legal building limits for a parcel and lists the zone table.
"""

from fastapi import APIRouter

from api.schemas.regulations import (
    RegulationCalculateRequest,
    RegulationResponse,
    ZoneListResponse,
)
from siteplan.regulations.engine import RegulationEngine
from siteplan.regulations.solar import applies_to_zone
from siteplan.regulations.zones import ZONE_REGULATIONS
from siteplan.config import settings as core_settings

router = APIRouter(prefix="/api/regulations", tags=["Regulations"])

_engine = RegulationEngine(floor_height_m=core_settings.floor_height_m)


def get_engine() -> RegulationEngine:
    return _engine


# ---- endpoints -------------------------------------------------------------

@router.post("/calculate", response_model=RegulationResponse)
async def calculate_regulations(request: RegulationCalculateRequest):
    """Calculate buildable area, footprint, floor area and floor limits."""
    result = get_engine().calculate(request.to_parcel_input())
    return result.to_dict()


@router.get("/zones", response_model=ZoneListResponse)
async def list_zones():
    """List every zone type with its regulation constants."""
    zones = [
        {
            "zoneType": zone.value,
            "nameKo": reg.name_ko,
            "maxCoverageRatio": reg.max_coverage_ratio,
            "maxFloorAreaRatio": reg.max_floor_area_ratio,
            "maxHeight": reg.max_height,
            "maxFloors": reg.max_floors,
            "setbackFront": reg.setback_front,
            "setbackRear": reg.setback_rear,
            "setbackLeft": reg.setback_left,
            "setbackRight": reg.setback_right,
            "solarAccess": applies_to_zone(zone),
        }
        for zone, reg in ZONE_REGULATIONS.items()
    ]
    return {"zones": zones}
